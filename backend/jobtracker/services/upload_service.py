import hashlib
from pathlib import Path

from jobtracker.config import settings
from jobtracker.utils.filesystem import ensure_data_dirs, sanitize_filename

UPLOADS_URL_PREFIX = "/uploads"


def store_upload(filename: str | None, content: bytes) -> str:
    """Write an uploaded file into the uploads directory. Returns its public URL."""
    file_hash = hashlib.sha256(content).hexdigest()
    safe_name = sanitize_filename(filename or "upload")
    stored_name = f"{file_hash[:12]}_{safe_name}"

    uploads_dir = ensure_data_dirs() / "uploads"
    (uploads_dir / stored_name).write_bytes(content)

    return f"{UPLOADS_URL_PREFIX}/{stored_name}"


def get_upload_path(url: str, data_dir: Path | None = None) -> Path:
    name = url.removeprefix(UPLOADS_URL_PREFIX + "/")
    return (data_dir or settings.data_dir) / "uploads" / sanitize_filename(name)
