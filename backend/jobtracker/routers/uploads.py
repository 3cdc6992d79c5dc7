import logging

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import FileResponse, JSONResponse

from jobtracker.config import settings
from jobtracker.schemas.job import UploadResponse
from jobtracker.services.upload_service import UPLOADS_URL_PREFIX, get_upload_path, store_upload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"])


@router.post("/upload", response_model=UploadResponse)
async def upload_file(file: UploadFile | None = File(None)):
    if file is None:
        return JSONResponse(status_code=400, content={"error": "No file uploaded"})

    max_bytes = settings.max_upload_bytes
    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            return JSONResponse(status_code=413, content={"error": f"File too large (max {max_bytes} bytes)"})
        chunks.append(chunk)

    content = b"".join(chunks)
    if not content:
        return JSONResponse(status_code=400, content={"error": "Empty file"})

    url = store_upload(file.filename, content)
    logger.info("Stored upload %s (%d bytes)", url, size)
    return UploadResponse(url=url)


files_router = APIRouter(prefix=UPLOADS_URL_PREFIX, tags=["uploads"])


@files_router.get("/{name}")
async def get_upload(name: str):
    path = get_upload_path(f"{UPLOADS_URL_PREFIX}/{name}")
    if not path.is_file():
        return JSONResponse(status_code=404, content={"error": "File not found"})
    return FileResponse(path)
