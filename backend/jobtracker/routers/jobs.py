import json
import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobtracker.database import get_db
from jobtracker.models.job import Job
from jobtracker.schemas.job import Job as JobSchema, JobCreated, JobFields, SuccessResponse
from jobtracker.services.export_service import export_csv, export_json

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])

EXPORT_FORMATS = ("csv", "json")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _decode_list(raw: str | None) -> list:
    return json.loads(raw) if raw else []


def _job_to_response(job: Job) -> JobSchema:
    return JobSchema(
        id=job.id,
        title=job.title,
        company=job.company,
        url=job.url,
        date_applied=job.date_applied,
        status=job.status,
        work_model=job.work_model,
        salary_range=job.salary_range,
        salary_frequency=job.salary_frequency,
        tech_stack=_decode_list(job.tech_stack),
        notes=job.notes,
        screenshot_url=job.screenshot_url,
        resume_url=job.resume_url,
        cover_letter_url=job.cover_letter_url,
        attachments=_decode_list(job.attachments),
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


def _apply_fields(job: Job, req: JobFields):
    data = req.model_dump(mode="json")
    data["tech_stack"] = json.dumps(data["tech_stack"])
    data["attachments"] = json.dumps(data["attachments"])
    for key, value in data.items():
        setattr(job, key, value)


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@router.get("", response_model=list[JobSchema])
async def list_jobs(db: Session = Depends(get_db)):
    try:
        jobs = db.query(Job).order_by(Job.date_applied.desc(), Job.id.desc()).all()
    except SQLAlchemyError:
        logger.exception("Failed to fetch jobs")
        return _error(500, "Failed to fetch jobs")
    return [_job_to_response(j) for j in jobs]


@router.get("/export")
async def export_jobs(format: str = Query("json"), db: Session = Depends(get_db)):
    if format not in EXPORT_FORMATS:
        raise HTTPException(status_code=400, detail=f"Invalid format. Must be one of: {', '.join(EXPORT_FORMATS)}")

    jobs = [_job_to_response(j) for j in db.query(Job).order_by(Job.date_applied.desc(), Job.id.desc()).all()]
    filename = f"jobs_export_{date.today().isoformat()}.{format}"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}

    if format == "csv":
        return Response(content=export_csv(jobs), media_type="text/csv", headers=headers)
    return Response(
        content=json.dumps(export_json(jobs), indent=2),
        media_type="application/json",
        headers=headers,
    )


@router.get("/{job_id}", response_model=JobSchema)
async def get_job(job_id: int, db: Session = Depends(get_db)):
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        return _error(404, "Job not found")
    return _job_to_response(job)


@router.post("", response_model=JobCreated)
async def create_job(req: JobFields, db: Session = Depends(get_db)):
    now = _now()
    job = Job(created_at=now, updated_at=now)
    _apply_fields(job, req)

    try:
        db.add(job)
        db.commit()
        db.refresh(job)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to create job %r", req.title)
        return _error(500, "Failed to create job")

    logger.info("Created job %d (%s at %s)", job.id, job.title, job.company)
    return JobCreated(id=job.id)


@router.put("/{job_id}", response_model=SuccessResponse)
async def update_job(job_id: int, req: JobFields, db: Session = Depends(get_db)):
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        return _error(404, "Job not found")

    _apply_fields(job, req)
    job.updated_at = _now()

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to update job %d", job_id)
        return _error(500, "Failed to update job")
    return SuccessResponse()


@router.delete("/{job_id}", response_model=SuccessResponse)
async def delete_job(job_id: int, db: Session = Depends(get_db)):
    # Deleting a job that is already gone still succeeds
    try:
        deleted = db.query(Job).filter(Job.id == job_id).delete()
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to delete job %d", job_id)
        return _error(500, "Failed to delete job")

    if not deleted:
        logger.info("Delete of job %d was a no-op; it no longer exists", job_id)
    return SuccessResponse()
