import logging

import httpx
from pydantic import TypeAdapter

from jobtracker.config import settings
from jobtracker.errors import AIParsingError, NetworkError, ServerError
from jobtracker.schemas.job import ImageInput, Job, JobCreated, JobFields, PartialJobFields, UploadResponse

logger = logging.getLogger(__name__)

_JOB_LIST = TypeAdapter(list[Job])

EXPORT_FORMATS = ("csv", "json")


def _error_message(response: httpx.Response, fallback: str) -> str:
    """The server's reason string when the body carries one, else the fallback."""
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        for key in ("error", "detail"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return fallback


class JobTrackerAPI:
    """Thin async wrapper over the job tracker REST API.

    Each method issues exactly one request. Transport failures raise
    NetworkError, non-2xx responses raise ServerError. Nothing is retried.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            transport=transport,
            timeout=timeout or settings.request_timeout,
        )
        self.prefix = settings.api_prefix

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method: str, path: str, fallback: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, f"{self.prefix}{path}", **kwargs)
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise NetworkError(f"{fallback}: {exc}") from exc

        if not response.is_success:
            message = _error_message(response, fallback)
            logger.warning("%s %s returned %d: %s", method, path, response.status_code, message)
            raise ServerError(response.status_code, message)
        return response

    async def list_jobs(self) -> list[Job]:
        response = await self._request("GET", "/jobs", "Failed to fetch jobs")
        return _JOB_LIST.validate_python(response.json())

    async def get_job(self, job_id: int) -> Job:
        response = await self._request("GET", f"/jobs/{job_id}", "Failed to fetch job")
        return Job.model_validate(response.json())

    async def create_job(self, fields: JobFields) -> int:
        response = await self._request(
            "POST", "/jobs", "Failed to create application", json=fields.model_dump(mode="json")
        )
        return JobCreated.model_validate(response.json()).id

    async def update_job(self, job_id: int, fields: JobFields) -> None:
        await self._request(
            "PUT", f"/jobs/{job_id}", "Failed to update application", json=fields.model_dump(mode="json")
        )

    async def delete_job(self, job_id: int) -> None:
        await self._request("DELETE", f"/jobs/{job_id}", "Failed to delete application")

    async def upload_file(self, filename: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        response = await self._request(
            "POST", "/upload", "Failed to upload file", files={"file": (filename, content, content_type)}
        )
        return UploadResponse.model_validate(response.json()).url

    async def export_jobs(self, format: str = "json") -> bytes:
        if format not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format: {format}")
        response = await self._request("GET", "/jobs/export", "Export failed", params={"format": format})
        return response.content

    async def parse_job(self, text: str | None = None, image: ImageInput | None = None) -> PartialJobFields:
        data = {"text": text} if text else {}
        files = {"image": ("screenshot", image.data, image.mime_type)} if image else None
        try:
            response = await self._request("POST", "/parse", "AI parsing failed", data=data, files=files)
        except ServerError as exc:
            raise AIParsingError(exc.message, missing_credential=exc.status_code == 503) from exc
        return PartialJobFields.model_validate(response.json())
