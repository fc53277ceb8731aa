from pydantic_settings import BaseSettings
from typing import Optional, List
from pathlib import Path
import zoneinfo
import json


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./campus_events.db"
    # Seconds a SQLite writer waits for the database lock
    SQLITE_BUSY_TIMEOUT: int = 30

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: Optional[str] = None

    # Auth
    SECRET_KEY: str = "change-me"
    ACCESS_TOKEN_TTL_MINUTES: int = 60 * 24
    PASSWORD_MIN_LENGTH: int = 6

    # Events
    EVENT_AUTO_APPROVE: bool = True
    REGISTRATION_RETRY_ATTEMPTS: int = 3

    # Storage
    MEDIA_ROOT: str = "./media"
    STORAGE_BUCKET: str = "event-images"
    MAX_POSTER_BYTES: int = 5 * 1024 * 1024
    POSTER_EXTENSIONS: str = "jpg,jpeg,png,gif,webp"
    POSTER_CLEANUP_INTERVAL_SECONDS: int = 3600
    SCHEDULER_ENABLED: bool = True

    # Timezone
    TIMEZONE: str = "UTC"

    LOG_LEVEL: str = "INFO"

    @property
    def timezone(self):
        """Configured timezone object"""
        try:
            return zoneinfo.ZoneInfo(self.TIMEZONE)
        except zoneinfo.ZoneInfoNotFoundError:
            from datetime import timezone
            return timezone.utc

    @property
    def bucket_path(self) -> Path:
        return Path(self.MEDIA_ROOT) / self.STORAGE_BUCKET

    @property
    def poster_extensions(self) -> List[str]:
        return [x.strip().lower().lstrip(".") for x in self.POSTER_EXTENSIONS.split(",") if x.strip()]

    @property
    def cors_origins(self) -> List[str]:
        """
        Allowed CORS origins.
        Supports:
        - CSV:  "http://a.edu,http://b.edu"
        - JSON: '["http://a.edu"]'
        Empty means any origin.
        """
        raw = self.CORS_ORIGINS
        if not raw:
            return ["*"]

        try:
            data = json.loads(raw)
            if isinstance(data, list):
                return [str(x).strip() for x in data if str(x).strip()]
        except ValueError:
            pass

        return [x.strip() for x in raw.split(",") if x.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
