from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from jobtracker.dependencies import get_job_parser
from jobtracker.errors import AIParsingError
from jobtracker.schemas.job import PartialJobFields
from jobtracker.schemas.job import ImageInput
from jobtracker.services.parse_service import JobParser

router = APIRouter(tags=["parse"])


@router.post("/parse", response_model=PartialJobFields)
async def parse_job(
    text: str | None = Form(None),
    image: UploadFile | None = File(None),
    parser: JobParser = Depends(get_job_parser),
):
    """Extract job fields from pasted posting text or a screenshot."""
    image_input = None
    if image is not None:
        data = await image.read()
        if data:
            image_input = ImageInput(data=data, mime_type=image.content_type or "image/png")

    if image_input is None and not (text and text.strip()):
        return JSONResponse(status_code=400, content={"error": "No input provided for parsing"})

    try:
        return await parser.parse(text=text, image=image_input)
    except AIParsingError as exc:
        status_code = 503 if exc.missing_credential else 502
        return JSONResponse(status_code=status_code, content={"error": str(exc)})
