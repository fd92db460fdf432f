from dataclasses import dataclass, field
import os
from urllib.parse import unquote, urlsplit

CODE_SPACE = 10_000


def _as_bool(value: str) -> bool:
    return value.lower() in ("1", "true", "yes")


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _code_budget(value: str) -> int:
    return max(0, min(int(value), CODE_SPACE))


_DB_URL = urlsplit(os.getenv("DATABASE_URL", ""))


@dataclass(frozen=True)
class Settings:
    db_host: str = os.getenv("DB_HOST", _DB_URL.hostname or "")
    db_port: int = int(os.getenv("DB_PORT", str(_DB_URL.port or 5432)))
    db_name: str = os.getenv("DB_NAME", unquote(_DB_URL.path.lstrip("/")))
    db_user: str = os.getenv("DB_USER", unquote(_DB_URL.username or ""))
    db_password: str = os.getenv("DB_PASSWORD", unquote(_DB_URL.password or ""))
    auto_migrate: bool = _as_bool(os.getenv("AUTO_MIGRATE", "false"))
    port: int = int(os.getenv("PORT", "5000"))
    admin_secret: str = os.getenv("ADMIN_SECRET", "")
    admin_token_ttl_minutes: int = int(os.getenv("ADMIN_TOKEN_TTL_MINUTES", "720"))
    max_codes: int = _code_budget(os.getenv("MAX_CODES", str(CODE_SPACE)))
    resend_api_key: str = os.getenv("RESEND_API_KEY", "")
    email_from: str = os.getenv("EMAIL_FROM", "Raffle Support <support@example.com>")
    email_timeout_seconds: float = float(os.getenv("EMAIL_TIMEOUT_SECONDS", "15"))
    email_workers: int = int(os.getenv("EMAIL_WORKERS", "4"))
    images_dir: str = os.getenv("IMAGES_DIR", "images")
    uploads_dir: str = os.getenv("UPLOADS_DIR", "uploads")
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_MB", "50")) * 1024 * 1024
    cors_allow_origins: list[str] = field(
        default_factory=lambda: _split_csv(os.getenv("CORS_ALLOW_ORIGINS", "*"))
    )
    cors_allow_methods: list[str] = field(
        default_factory=lambda: _split_csv(os.getenv("CORS_ALLOW_METHODS", "GET,POST,PUT,DELETE"))
    )
    cors_allow_headers: list[str] = field(
        default_factory=lambda: _split_csv(
            os.getenv("CORS_ALLOW_HEADERS", "Content-Type,Authorization")
        )
    )
    expose_errors: bool = _as_bool(os.getenv("EXPOSE_ERRORS", "false"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def resend_enabled(self) -> bool:
        return bool(self.resend_api_key)


settings = Settings()


def db_configured() -> bool:
    return all([settings.db_host, settings.db_name, settings.db_user, settings.db_password])
