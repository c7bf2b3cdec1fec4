# Standard library imports
import secrets
from typing import Annotated, Any, Literal

# Third-party imports
from pydantic import AnyUrl, BeforeValidator, computed_field
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class CommonSettings(BaseSettings):
    model_config = SettingsConfigDict(
        # Use top level .env file (one level above ./back/)
        env_file="../.env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # General settings
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["dev", "test", "staging", "production"] = "dev"
    DEBUG_MODE: bool = False
    PROJECT_NAME: str = "CivicLink"

    # Database settings
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "civiclink"
    POSTGRES_PASSWORD: str = "civiclink"
    POSTGRES_DB: str = "civiclink"

    # Overrides the computed Postgres URI when set (e.g. sqlite+aiosqlite:///./civiclink.db)
    DATABASE_URL: str | None = None
    DATABASE_ECHO: bool = False

    # "database" persists through SQLAlchemy, "memory" keeps issues in process
    STORAGE_BACKEND: Literal["database", "memory"] = "database"

    @property
    def SQLALCHEMY_ASYNC_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return str(
            MultiHostUrl.build(
                scheme="postgresql+asyncpg",  # async driver for async queries
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD,
                host=self.POSTGRES_SERVER,
                port=self.POSTGRES_PORT,
                path=self.POSTGRES_DB,
            )
        )

    # CORS settings
    BACKEND_CORS_ORIGINS: Annotated[list[AnyUrl] | str, BeforeValidator(parse_cors)] = [
        AnyUrl("http://localhost/"),
        AnyUrl("http://localhost:3000/"),
        AnyUrl("http://localhost:8000/"),
        AnyUrl("https://civiclink.app/"),
    ]

    @computed_field  # type: ignore[prop-decorator, misc]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]

    # Optional settings
    SENTRY_DSN: str | None = None

    # JWT settings (tokens are issued by the identity service)
    JWT_ALGORITHM: str = "HS256"
    JWT_SECRET_KEY: str = secrets.token_urlsafe(32)
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 1

    # Redis settings
    REDIS_URL: str = "redis://localhost:6379/0"
    GAP_ANALYSIS_CACHE_SECONDS: int = 15 * 60
    GAP_ANALYSIS_TIMEOUT_SECONDS: float = 30.0

    # Celery settings
    CELERY_BROKER_URL: str = "redis://localhost:6379/2"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/3"
    CELERY_WORKER_CONCURRENCY: int = 4
    CELERY_TASK_TIME_LIMIT: int = 300  # 5 minutes
    CELERY_TASK_SOFT_TIME_LIMIT: int = 240  # 4 minutes

    # AI enrichment settings
    ENRICHMENT_PROVIDER: Literal["gemini", "disabled"] = "disabled"
    ENRICHMENT_DISPATCH: Literal["inline", "celery"] = "inline"
    ENRICHMENT_TIMEOUT_SECONDS: float = 5.0
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta/models"

    # Geocoding settings
    GEOCODING_PROVIDER: Literal["nominatim", "disabled"] = "nominatim"
    NOMINATIM_URL: str = "https://nominatim.openstreetmap.org/search"
    GEOCODING_USER_AGENT: str = "civiclink-backend/1.0"
    GEOCODING_TIMEOUT_SECONDS: float = 5.0

    # Issue lifecycle settings
    MAX_CONFLICT_RETRIES: int = 3
    SELF_UPVOTE_ON_CREATE: bool = False

    # Pagination configurations
    PAGINATION_CONFIGS: dict[str, dict[str, int]] = {
        "issues": {
            "default_limit": 50,
            "max_limit": 500,
            "min_limit": 1,
            "default_offset": 0,
        },
    }
