from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_dir: Path = Path.home() / "JobTracker"
    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MiB
    api_prefix: str = "/api"
    host: str = "127.0.0.1"
    port: int = 3000
    cors_origins: list[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]
    log_level: str = "INFO"

    # AI parsing goes through an OpenAI-compatible endpoint (Gemini by default)
    ai_api_key: str | None = None
    ai_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    ai_model: str = "gemini-2.5-flash"

    # Client side
    api_base_url: str = "http://127.0.0.1:3000"
    request_timeout: float = 30.0

    @property
    def db_path(self) -> Path:
        return self.data_dir / "jobs.sqlite"

    @property
    def uploads_dir(self) -> Path:
        return self.data_dir / "uploads"

    model_config = {"env_prefix": "JOBTRACKER_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
