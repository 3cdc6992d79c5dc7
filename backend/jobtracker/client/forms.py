from dataclasses import dataclass, field
from datetime import date

from jobtracker.errors import ValidationError
from jobtracker.schemas.job import Attachment, Job, JobFields, JobStatus, PartialJobFields, SalaryFrequency

WORK_MODELS = ("Remote", "Hybrid", "On-site")


def normalize_work_model(value: str | None) -> str | None:
    """Map free-form work model text onto one of WORK_MODELS, or None."""
    if not value:
        return None
    lowered = value.strip().lower()
    for model in WORK_MODELS:
        if lowered == model.lower():
            return model
    if "remote" in lowered:
        return "Remote"
    if "hybrid" in lowered:
        return "Hybrid"
    if "on-site" in lowered or "onsite" in lowered:
        return "On-site"
    return None


@dataclass
class JobDraft:
    """Editable form state for one job before it is submitted."""

    title: str = ""
    company: str = ""
    url: str = ""
    date_applied: date | None = field(default_factory=date.today)
    status: JobStatus | None = JobStatus.APPLIED
    work_model: str = "Remote"
    salary_range: str = ""
    salary_frequency: SalaryFrequency = SalaryFrequency.YEARLY
    notes: str = ""
    screenshot_url: str = ""
    resume_url: str = ""
    cover_letter_url: str = ""
    tech_stack: list[str] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)

    @classmethod
    def from_job(cls, job: Job) -> "JobDraft":
        return cls(
            title=job.title,
            company=job.company,
            url=job.url or "",
            date_applied=job.date_applied,
            status=job.status,
            work_model=job.work_model or "",
            salary_range=job.salary_range or "",
            salary_frequency=job.salary_frequency,
            notes=job.notes or "",
            screenshot_url=job.screenshot_url or "",
            resume_url=job.resume_url or "",
            cover_letter_url=job.cover_letter_url or "",
            tech_stack=list(job.tech_stack),
            attachments=list(job.attachments),
        )

    def add_tech(self, tag: str) -> bool:
        tag = tag.strip()
        if not tag or tag in self.tech_stack:
            return False
        self.tech_stack.append(tag)
        return True

    def remove_tech(self, tag: str):
        self.tech_stack = [t for t in self.tech_stack if t != tag]

    def add_attachment(self, name: str, url: str):
        self.attachments.append(Attachment(name=name, url=url))

    def remove_attachment(self, index: int):
        del self.attachments[index]

    def apply_parsed(self, parsed: PartialJobFields):
        """Merge AI-extracted fields; anything the model left out keeps its current value."""
        self.title = parsed.title
        self.company = parsed.company
        work_model = normalize_work_model(parsed.work_model)
        if work_model:
            self.work_model = work_model
        if parsed.salary_range:
            self.salary_range = parsed.salary_range
        if parsed.salary_frequency:
            self.salary_frequency = parsed.salary_frequency
        if parsed.tech_stack:
            self.tech_stack = []
            for tag in parsed.tech_stack:
                self.add_tech(tag)
        if parsed.notes:
            self.notes = parsed.notes

    def missing_fields(self) -> list[str]:
        missing = []
        if not self.title.strip():
            missing.append("title")
        if not self.company.strip():
            missing.append("company")
        if self.date_applied is None:
            missing.append("date_applied")
        if self.status is None:
            missing.append("status")
        return missing

    def to_fields(self) -> JobFields:
        missing = self.missing_fields()
        if missing:
            raise ValidationError(missing)
        return JobFields(
            title=self.title,
            company=self.company,
            url=self.url or None,
            date_applied=self.date_applied,
            status=self.status,
            work_model=self.work_model or None,
            salary_range=self.salary_range or None,
            salary_frequency=self.salary_frequency,
            notes=self.notes or None,
            screenshot_url=self.screenshot_url or None,
            resume_url=self.resume_url or None,
            cover_letter_url=self.cover_letter_url or None,
            tech_stack=tuple(self.tech_stack),
            attachments=tuple(self.attachments),
        )
