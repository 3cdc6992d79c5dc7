import sqlite3
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from jobtracker.config import settings


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS jobs (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    title            TEXT NOT NULL,
    company          TEXT NOT NULL,
    url              TEXT,
    date_applied     TEXT NOT NULL,
    status           TEXT NOT NULL
                     CHECK(status IN ('Saved','Applied','Interview','Technical Test',
                                      'Offer','Rejected')),
    work_model       TEXT,
    salary_range     TEXT,
    salary_frequency TEXT DEFAULT 'Yearly'
                     CHECK(salary_frequency IN ('Hourly','Monthly','Yearly')),
    tech_stack       TEXT,
    notes            TEXT,
    screenshot_url   TEXT,
    resume_url       TEXT,
    cover_letter_url TEXT,
    attachments      TEXT,
    created_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_jobs_date_applied ON jobs(date_applied);
CREATE INDEX IF NOT EXISTS idx_jobs_status ON jobs(status);
"""


MIGRATIONS = [
    # v0.2: pay period next to the salary range
    "ALTER TABLE jobs ADD COLUMN salary_frequency TEXT DEFAULT 'Yearly'",
    # v0.3: free-form attachments list
    "ALTER TABLE jobs ADD COLUMN attachments TEXT",
]


def run_migrations(conn: sqlite3.Connection):
    for migration in MIGRATIONS:
        try:
            conn.execute(migration)
            conn.commit()
        except sqlite3.OperationalError:
            pass  # column already exists


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    run_migrations(conn)
    conn.close()
