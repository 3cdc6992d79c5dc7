from conftest import job_payload


class TestJobsCRUD:
    def _create(self, client, **overrides):
        r = client.post("/api/jobs", json=job_payload(**overrides))
        assert r.status_code == 200
        return r.json()["id"]

    def test_create_job_returns_id(self, client):
        r = client.post("/api/jobs", json=job_payload())
        assert r.status_code == 200
        assert isinstance(r.json()["id"], int)

    def test_create_applies_defaults(self, client):
        job_id = self._create(client)
        job = client.get(f"/api/jobs/{job_id}").json()
        assert job["salary_frequency"] == "Yearly"
        assert job["tech_stack"] == []
        assert job["attachments"] == []
        assert job["created_at"]
        assert job["updated_at"]

    def test_empty_salary_frequency_defaults_to_yearly(self, client):
        job_id = self._create(client, salary_frequency="")
        assert client.get(f"/api/jobs/{job_id}").json()["salary_frequency"] == "Yearly"

    def test_list_jobs_decodes_arrays(self, client):
        self._create(
            client,
            tech_stack=["Python", "FastAPI"],
            attachments=[{"name": "cv.pdf", "url": "/uploads/abc_cv.pdf"}],
        )
        r = client.get("/api/jobs")
        assert r.status_code == 200
        jobs = r.json()
        assert len(jobs) == 1
        assert jobs[0]["tech_stack"] == ["Python", "FastAPI"]
        assert jobs[0]["attachments"] == [{"name": "cv.pdf", "url": "/uploads/abc_cv.pdf"}]

    def test_list_jobs_newest_first(self, client):
        self._create(client, title="Old", date_applied="2023-05-01")
        self._create(client, title="New", date_applied="2024-02-01")
        self._create(client, title="Middle", date_applied="2023-11-20")
        titles = [j["title"] for j in client.get("/api/jobs").json()]
        assert titles == ["New", "Middle", "Old"]

    def test_list_jobs_empty(self, client):
        r = client.get("/api/jobs")
        assert r.status_code == 200
        assert r.json() == []

    def test_missing_required_field_rejected(self, client):
        payload = job_payload()
        del payload["company"]
        r = client.post("/api/jobs", json=payload)
        assert r.status_code == 422

    def test_blank_title_rejected(self, client):
        r = client.post("/api/jobs", json=job_payload(title="   "))
        assert r.status_code == 422

    def test_unknown_status_rejected(self, client):
        r = client.post("/api/jobs", json=job_payload(status="Ghosted"))
        assert r.status_code == 422

    def test_pending_status_rejected(self, client):
        r = client.post("/api/jobs", json=job_payload(status="Pending"))
        assert r.status_code == 422

    def test_update_job(self, client):
        job_id = self._create(client)
        r = client.put(
            f"/api/jobs/{job_id}",
            json=job_payload(status="Interview", tech_stack=["Go"]),
        )
        assert r.status_code == 200
        assert r.json() == {"success": True}

        job = client.get(f"/api/jobs/{job_id}").json()
        assert job["status"] == "Interview"
        assert job["tech_stack"] == ["Go"]

    def test_update_missing_job(self, client):
        r = client.put("/api/jobs/999", json=job_payload())
        assert r.status_code == 404
        assert r.json() == {"error": "Job not found"}

    def test_delete_job(self, client):
        job_id = self._create(client)
        r = client.delete(f"/api/jobs/{job_id}")
        assert r.status_code == 200
        assert r.json() == {"success": True}

        r = client.get(f"/api/jobs/{job_id}")
        assert r.status_code == 404

    def test_delete_is_idempotent(self, client):
        job_id = self._create(client)
        client.delete(f"/api/jobs/{job_id}")
        r = client.delete(f"/api/jobs/{job_id}")
        assert r.status_code == 200
        assert r.json() == {"success": True}

    def test_ids_are_not_reused(self, client):
        first = self._create(client)
        client.delete(f"/api/jobs/{first}")
        second = self._create(client)
        assert second != first

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"
