"""AI-assisted extraction of job fields from posting text or a screenshot.

The model sits behind an OpenAI-compatible chat completions endpoint
(Gemini's by default). Everything past the HTTP call is plain parsing and
validation so it can be exercised without a model.
"""
import json
import logging
import re

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError as PydanticValidationError

from jobtracker.config import settings
from jobtracker.errors import AIParsingError
from jobtracker.schemas.job import ImageInput, PartialJobFields

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a world-class recruitment assistant. Your task is to extract job details \
from the provided text or screenshot. Be thorough and extract as much information \
as possible.

FIELDS TO EXTRACT:
1. title: The exact job title.
2. company: The company name.
3. work_model: MUST be "Remote", "Hybrid", or "On-site".
4. salary_range: Base salary, equity and any other compensation mentioned \
(e.g. "$65k - $120k + $20k Equity").
5. salary_frequency: MUST be one of "Hourly", "Monthly" or "Yearly". Default to "Yearly".
6. tech_stack: Every technology, language, framework and tool mentioned, as a list of strings.
7. notes: A summary of the company's mission, team culture and the key impact of the role.

Return ONLY a JSON object with these keys. "title" and "company" are required.
"""

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")
_FENCED_ANY = re.compile(r"```\s*([\s\S]*?)\s*```")


def parse_job_response(text: str | None) -> PartialJobFields:
    """Decode and validate the raw model output."""
    if not text or not text.strip():
        raise AIParsingError("AI returned an empty response")

    match = _FENCED_JSON.search(text) or _FENCED_ANY.search(text)
    if match:
        text = match.group(1)

    try:
        data = json.loads(text.strip())
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse AI response: %s", text)
        raise AIParsingError("AI returned invalid JSON format") from exc

    if not isinstance(data, dict):
        raise AIParsingError("AI returned invalid JSON format")

    try:
        return PartialJobFields.model_validate(data)
    except PydanticValidationError as exc:
        missing = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        raise AIParsingError(f"AI response is missing required fields: {', '.join(missing)}") from exc


class JobParser:
    """Interface: turn posting text or a screenshot into partial job fields."""

    async def parse(self, text: str | None = None, image: ImageInput | None = None) -> PartialJobFields:
        raise NotImplementedError


class OpenAIJobParser(JobParser):
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        client: AsyncOpenAI | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.ai_api_key
        self.base_url = base_url or settings.ai_base_url
        self.model = model or settings.ai_model
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise AIParsingError(
                    "AI API key is missing. Set JOBTRACKER_AI_API_KEY in the environment.",
                    missing_credential=True,
                )
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    @staticmethod
    def build_user_content(text: str | None, image: ImageInput | None) -> list[dict]:
        if image is not None:
            return [
                {"type": "image_url", "image_url": {"url": image.to_data_url()}},
                {"type": "text", "text": "EXTRACT JOB DETAILS FROM THIS SCREENSHOT."},
            ]
        if text and text.strip():
            return [{"type": "text", "text": f"EXTRACT JOB DETAILS FROM THIS TEXT:\n\n{text}"}]
        raise AIParsingError("No input provided for parsing")

    async def parse(self, text: str | None = None, image: ImageInput | None = None) -> PartialJobFields:
        content = self.build_user_content(text, image)
        client = self._get_client()

        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": content},
                ],
                response_format={"type": "json_object"},
                temperature=0.0,
            )
        except OpenAIError as exc:
            logger.error("AI request failed: %s", exc)
            raise AIParsingError(f"AI request failed: {exc}") from exc

        if not response.choices:
            raise AIParsingError("AI returned an empty response")
        return parse_job_response(response.choices[0].message.content)
