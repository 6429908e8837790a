from dataclasses import dataclass
from pathlib import Path
import os


def _csv_env(name: str, default: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in os.getenv(name, default).split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    app_name: str = "HR Portal"
    secret_key: str = os.getenv("HR_PORTAL_SECRET_KEY", "change-me-for-production")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "120"))
    log_level: str = os.getenv("HR_PORTAL_LOG_LEVEL", "INFO").upper()
    data_dir: Path = Path(
        os.getenv("HR_PORTAL_DATA_DIR", str(Path(__file__).resolve().parents[2] / "data"))
    )
    seed_demo_data: bool = os.getenv("HR_PORTAL_SEED_DEMO_DATA", "true").lower() in {"1", "true", "yes"}
    cors_origins: tuple[str, ...] = _csv_env(
        "CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000"
    )

    default_casual_days: int = 25
    default_sick_days: int = 999
    default_annual_days: int = 20
    medical_certificate_threshold_days: int = 3

    max_upload_bytes: int = 5 * 1024 * 1024
    storage_url: str = os.getenv("SUPABASE_URL", "")
    storage_service_key: str = os.getenv("SUPABASE_SERVICE_KEY", "")
    storage_bucket: str = os.getenv("STORAGE_BUCKET", "employee-documents")

    stream_api_key: str = os.getenv("STREAM_API_KEY", "")
    stream_api_secret: str = os.getenv("STREAM_API_SECRET", "")
    stream_base_url: str = os.getenv("STREAM_BASE_URL", "https://chat.stream-io-api.com")

    @property
    def event_log_path(self) -> Path:
        return self.data_dir / "events.jsonl"


settings = Settings()
settings.data_dir.mkdir(parents=True, exist_ok=True)
