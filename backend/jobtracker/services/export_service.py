import csv
import io
import json
from datetime import datetime, timezone

from jobtracker.schemas.job import Job

CSV_COLUMNS = [
    "id", "title", "company", "url", "date_applied", "status", "work_model",
    "salary_range", "salary_frequency", "tech_stack", "notes", "screenshot_url",
    "resume_url", "cover_letter_url", "attachments", "created_at", "updated_at",
]


def export_csv(jobs: list[Job]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_COLUMNS)
    for job in jobs:
        row = job.model_dump(mode="json")
        # List columns stay JSON so the file round-trips through a spreadsheet
        row["tech_stack"] = json.dumps(row["tech_stack"])
        row["attachments"] = json.dumps(row["attachments"])
        writer.writerow(["" if row[col] is None else row[col] for col in CSV_COLUMNS])
    return output.getvalue()


def export_json(jobs: list[Job]) -> dict:
    return {
        "version": "1",
        "exported_at": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "jobs": [job.model_dump(mode="json") for job in jobs],
    }
