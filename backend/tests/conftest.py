from datetime import date

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from jobtracker.client.api import JobTrackerAPI
from jobtracker.config import settings
from jobtracker.database import get_db
from jobtracker.main import app
from jobtracker.schemas.job import Job


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


@pytest.fixture
def tmp_data_dir(tmp_path):
    data_dir = tmp_path / "JobTracker"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def test_db(tmp_data_dir):
    db_path = tmp_data_dir / "jobs.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    from jobtracker.database import init_db
    init_db(db_path)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()


@pytest.fixture
def client(tmp_data_dir, test_db):
    original_data_dir = settings.data_dir
    settings.data_dir = tmp_data_dir
    c = TestClient(app)
    yield c
    settings.data_dir = original_data_dir


@pytest_asyncio.fixture
async def api(tmp_data_dir, test_db):
    """API client talking to the app in-process."""
    original_data_dir = settings.data_dir
    settings.data_dir = tmp_data_dir
    transport = httpx.ASGITransport(app=app)
    async with JobTrackerAPI("http://testserver", transport=transport) as a:
        yield a
    settings.data_dir = original_data_dir


def job_payload(**overrides) -> dict:
    payload = {
        "title": "Frontend Developer",
        "company": "Acme",
        "date_applied": "2024-01-15",
        "status": "Applied",
    }
    payload.update(overrides)
    return payload


def make_job(job_id: int, **overrides) -> Job:
    data = {
        "id": job_id,
        "title": f"Job {job_id}",
        "company": "Acme",
        "date_applied": date(2024, 1, 15),
        "status": "Applied",
    }
    data.update(overrides)
    return Job.model_validate(data)
