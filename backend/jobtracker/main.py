import logging
import sqlite3
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobtracker.config import settings
from jobtracker.database import init_db, run_migrations
from jobtracker.routers import jobs, parse, uploads
from jobtracker.utils.filesystem import ensure_data_dirs

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)
logger = logging.getLogger("jobtracker")


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_data_dirs()
    if settings.db_path.exists():
        try:
            conn = sqlite3.connect(str(settings.db_path))
            run_migrations(conn)
            result = conn.execute("PRAGMA integrity_check").fetchone()
            conn.close()
            if result and result[0] == "ok":
                logger.info("Database integrity check passed.")
            else:
                logger.error("DATABASE INTEGRITY CHECK FAILED: %s", result)
        except sqlite3.Error as exc:
            logger.error("Could not run startup migration/integrity check: %s", exc)
    init_db()
    logger.info("Job tracker API ready, data in %s", settings.data_dir)
    yield
    logger.info("Job tracker API stopped")


app = FastAPI(
    title="Job Tracker",
    description="Personal job application tracker API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(jobs.router, prefix=settings.api_prefix)
app.include_router(uploads.router, prefix=settings.api_prefix)
app.include_router(parse.router, prefix=settings.api_prefix)
app.include_router(uploads.files_router)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}


def run():
    uvicorn.run("jobtracker.main:app", host=settings.host, port=settings.port)
