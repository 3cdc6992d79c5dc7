import csv
import json

from conftest import job_payload
from jobtracker.services.export_service import CSV_COLUMNS


class TestExport:
    def test_csv_export_returns_correct_headers(self, client):
        r = client.get("/api/jobs/export?format=csv")
        assert r.status_code == 200
        assert "text/csv" in r.headers["content-type"]
        assert "attachment" in r.headers.get("content-disposition", "")

        rows = list(csv.reader(r.text.strip().splitlines()))
        assert rows[0] == CSV_COLUMNS

    def test_csv_export_contains_job_data(self, client):
        client.post("/api/jobs", json=job_payload(
            title="CSV Job",
            company="CSVCorp",
            tech_stack=["Python", "SQL"],
        ))

        r = client.get("/api/jobs/export?format=csv")
        rows = list(csv.DictReader(r.text.strip().splitlines()))
        assert len(rows) == 1
        row = rows[0]
        assert row["title"] == "CSV Job"
        assert row["company"] == "CSVCorp"
        assert row["salary_frequency"] == "Yearly"
        assert json.loads(row["tech_stack"]) == ["Python", "SQL"]
        assert json.loads(row["attachments"]) == []
        assert row["url"] == ""

    def test_csv_no_jobs_only_header(self, client):
        r = client.get("/api/jobs/export?format=csv")
        rows = list(csv.reader(r.text.strip().splitlines()))
        assert len(rows) == 1

    def test_json_export_structure(self, client):
        client.post("/api/jobs", json=job_payload(title="Job One"))
        client.post("/api/jobs", json=job_payload(title="Job Two", date_applied="2024-03-01"))

        r = client.get("/api/jobs/export?format=json")
        assert r.status_code == 200
        assert "attachment" in r.headers.get("content-disposition", "")
        data = r.json()
        assert data["version"] == "1"
        assert data["exported_at"]
        assert [j["title"] for j in data["jobs"]] == ["Job Two", "Job One"]
        assert data["jobs"][0]["tech_stack"] == []

    def test_json_is_default_format(self, client):
        r = client.get("/api/jobs/export")
        assert r.status_code == 200
        assert r.json()["jobs"] == []

    def test_unknown_format_rejected(self, client):
        r = client.get("/api/jobs/export?format=xml")
        assert r.status_code == 400
        assert "format" in r.json()["detail"]
