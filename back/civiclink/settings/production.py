# Standard library imports
from typing import Literal

# Local application imports
from civiclink.settings.common import CommonSettings


class ProductionSettings(CommonSettings):
    DEBUG_MODE: bool = False
    SENTRY_DSN: str | None = None
    ENRICHMENT_PROVIDER: Literal["gemini", "disabled"] = "gemini"
    ENRICHMENT_DISPATCH: Literal["inline", "celery"] = "celery"
