# Standard library imports
from typing import Literal

# Local application imports
from civiclink.settings.common import CommonSettings


class TestSettings(CommonSettings):
    DEBUG_MODE: bool = False
    STORAGE_BACKEND: Literal["database", "memory"] = "memory"
    DATABASE_URL: str | None = "sqlite+aiosqlite:///:memory:"
    JWT_SECRET_KEY: str = "test-secret-key"
    ENRICHMENT_PROVIDER: Literal["gemini", "disabled"] = "disabled"
    GEOCODING_PROVIDER: Literal["nominatim", "disabled"] = "disabled"
    GAP_ANALYSIS_CACHE_SECONDS: int = 0
