# Third-party imports
import httpx

# Local application imports
from civiclink.core.exceptions import EnrichmentUnavailable
from civiclink.core.monitoring.logging import get_contextual_logger
from civiclink.schemas.issues.enrichment_schemas import Coordinates
from civiclink.services.enrichment.ports import GeocodingPort

logger = get_contextual_logger(__name__, provider="nominatim")


class NominatimGeocoder(GeocodingPort):
    """Resolves addresses with an OpenStreetMap Nominatim search endpoint."""

    def __init__(
        self,
        url: str,
        user_agent: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._user_agent = user_agent
        self._timeout = timeout
        self._client = client

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            # Nominatim's usage policy requires an identifying User-Agent
            self._client = httpx.AsyncClient(timeout=self._timeout, headers={"User-Agent": self._user_agent})
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def resolve(self, address: str) -> Coordinates:
        client = self._ensure_client()
        try:
            response = await client.get(self._url, params={"q": address, "format": "json", "limit": 1})
            response.raise_for_status()
            results = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise EnrichmentUnavailable(f"Geocoding request failed: {exc}")

        if not results:
            raise EnrichmentUnavailable(f"No match for address '{address}'")
        try:
            return Coordinates(lat=float(results[0]["lat"]), lng=float(results[0]["lon"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise EnrichmentUnavailable(f"Unexpected geocoding result: {exc}")
