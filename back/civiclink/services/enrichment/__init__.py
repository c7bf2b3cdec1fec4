# Local application imports
from civiclink.core.monitoring.logging import get_logger
from civiclink.services.enrichment.disabled import DisabledEnrichment, DisabledGeocoder
from civiclink.services.enrichment.gemini_enrichment import GeminiEnrichment
from civiclink.services.enrichment.nominatim_geocoding import NominatimGeocoder
from civiclink.services.enrichment.ports import MIN_ISSUES_FOR_GAP_ANALYSIS, EnrichmentPort, GeocodingPort
from civiclink.settings import settings

logger = get_logger(__name__)


def get_enrichment_port() -> EnrichmentPort:
    """Build the enrichment adapter selected by ``ENRICHMENT_PROVIDER``."""
    if settings.ENRICHMENT_PROVIDER == "gemini":
        if not settings.GEMINI_API_KEY:
            logger.warning("ENRICHMENT_PROVIDER is gemini but GEMINI_API_KEY is not set; enrichment disabled")
            return DisabledEnrichment()
        return GeminiEnrichment(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            api_base=settings.GEMINI_API_BASE,
        )
    return DisabledEnrichment()


def get_geocoder() -> GeocodingPort:
    if settings.GEOCODING_PROVIDER == "nominatim":
        return NominatimGeocoder(
            url=settings.NOMINATIM_URL,
            user_agent=settings.GEOCODING_USER_AGENT,
            timeout=settings.GEOCODING_TIMEOUT_SECONDS,
        )
    return DisabledGeocoder()


__all__ = [
    "MIN_ISSUES_FOR_GAP_ANALYSIS",
    "DisabledEnrichment",
    "DisabledGeocoder",
    "EnrichmentPort",
    "GeminiEnrichment",
    "GeocodingPort",
    "NominatimGeocoder",
    "get_enrichment_port",
    "get_geocoder",
]
