import base64
from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator


class JobStatus(str, Enum):
    SAVED = "Saved"
    APPLIED = "Applied"
    INTERVIEW = "Interview"
    TECHNICAL_TEST = "Technical Test"
    OFFER = "Offer"
    REJECTED = "Rejected"
    # Client-side marker for a placeholder awaiting server confirmation.
    # Never accepted by the API.
    PENDING = "Pending"


class SalaryFrequency(str, Enum):
    HOURLY = "Hourly"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


class Attachment(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    url: str


class _JobBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    company: str
    url: str | None = None
    date_applied: date
    status: JobStatus
    work_model: str | None = None
    salary_range: str | None = None
    salary_frequency: SalaryFrequency = SalaryFrequency.YEARLY
    tech_stack: tuple[str, ...] = ()
    notes: str | None = None
    screenshot_url: str | None = None
    resume_url: str | None = None
    cover_letter_url: str | None = None
    attachments: tuple[Attachment, ...] = ()

    @field_validator("title", "company")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("salary_frequency", mode="before")
    @classmethod
    def _default_frequency(cls, value):
        return value or SalaryFrequency.YEARLY

    @field_validator("tech_stack", "attachments", mode="before")
    @classmethod
    def _default_list(cls, value):
        return () if value is None else value


class JobFields(_JobBase):
    """Body of POST /jobs and PUT /jobs/{id}."""

    @field_validator("status")
    @classmethod
    def _not_pending(cls, value: JobStatus) -> JobStatus:
        if value is JobStatus.PENDING:
            raise ValueError("Pending is not a storable status")
        return value


class Job(_JobBase):
    id: int
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def is_placeholder(self) -> bool:
        return self.status is JobStatus.PENDING

    def fields(self) -> JobFields:
        return JobFields.model_validate(
            self.model_dump(exclude={"id", "created_at", "updated_at"})
        )


class JobCreated(BaseModel):
    id: int


class SuccessResponse(BaseModel):
    success: bool = True


class UploadResponse(BaseModel):
    url: str


class PartialJobFields(BaseModel):
    """Fields the AI helper extracts from a posting; only title and company are guaranteed."""

    title: str
    company: str
    work_model: str | None = None
    salary_range: str | None = None
    salary_frequency: SalaryFrequency | None = None
    tech_stack: list[str] = []
    notes: str | None = None

    @field_validator("title", "company")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("salary_frequency", mode="before")
    @classmethod
    def _coerce_frequency(cls, value):
        if value is None or isinstance(value, SalaryFrequency):
            return value
        for frequency in SalaryFrequency:
            if str(value).strip().lower() == frequency.value.lower():
                return frequency
        return SalaryFrequency.YEARLY

    @field_validator("tech_stack", mode="before")
    @classmethod
    def _clean_tags(cls, value):
        if value is None:
            return []
        tags: list[str] = []
        for tag in value:
            tag = str(tag).strip()
            if tag and tag not in tags:
                tags.append(tag)
        return tags


class ImageInput(BaseModel):
    """A screenshot handed to the AI parser."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"
