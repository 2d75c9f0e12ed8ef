"""
Application configuration from environment variables.
Loads .env from the backend directory so secrets are found regardless of cwd.
"""
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET_KEY = "change-me-in-production"

# .env next to backend/ (parent of navigator/): load explicitly so SECRET_KEY is set even when run from repo root
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_ENV_FILE = _BACKEND_DIR / ".env"

if _ENV_FILE.exists():
    from dotenv import load_dotenv
    load_dotenv(_ENV_FILE, override=False)
else:
    # Fallback: try backend/.env relative to cwd (e.g. when running from repo root)
    import os
    _cwd_env = Path(os.getcwd()) / "backend" / ".env"
    if _cwd_env.exists():
        from dotenv import load_dotenv
        load_dotenv(_cwd_env, override=False)


class Settings(BaseSettings):
    """Load and validate config from env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database: sqlite for local runs without Docker, postgresql for production
    database_url: str = "sqlite:///./navigator_dev.db"

    # Environment: set ENV=production in production; used to enforce SECRET_KEY.
    env: str = ""

    # JWT. JWT_SECRET is accepted for deployments carried over from the Node server.
    secret_key: str = Field(
        default=DEFAULT_SECRET_KEY,
        validation_alias=AliasChoices("secret_key", "SECRET_KEY", "JWT_SECRET"),
    )
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24

    # bcrypt cost factor (2^rounds iterations)
    bcrypt_rounds: int = 10

    # CORS: comma-separated origins
    cors_origins: str = "http://localhost:3000"

    # Uploads: stored in the files table; images are re-encoded to fit these bounds
    max_upload_bytes: int = 10 * 1024 * 1024
    image_max_width: int = 1920
    image_max_height: int = 1080
    image_jpeg_quality: int = 80
    # images declaring more pixels than this are rejected before decoding
    image_max_pixels: int = 40_000_000
    file_cache_max_age: int = 31536000

    debug: bool = False

    @field_validator("bcrypt_rounds")
    @classmethod
    def _bcrypt_rounds_range(cls, v: int) -> int:
        # bcrypt.gensalt only accepts 4..31
        if v < 4 or v > 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31")
        return v

    @field_validator("image_jpeg_quality")
    @classmethod
    def _quality_range(cls, v: int) -> int:
        return max(1, min(95, v))

    @property
    def is_production(self) -> bool:
        return (self.env or "").strip().lower() == "production"


settings = Settings()
