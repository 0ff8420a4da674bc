"""Weather Underground conditions API client."""

import logging

import httpx
from pydantic import ValidationError

from ..config import WundergroundConfig
from ..errors import FetchError, FetchErrorKind
from ..schemas import RawObservation

logger = logging.getLogger(__name__)


class WundergroundClient:
    """HTTP client for the current conditions of personal weather stations.

    A single client is shared by all station schedulers. It makes exactly one
    request per call and never retries; the next scheduled tick is the retry.
    """

    def __init__(
        self,
        config: WundergroundConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize Weather Underground client.

        Args:
            config: Weather Underground configuration settings.
            http_client: Optional custom HTTP client for testing.
        """
        self.config = config or WundergroundConfig()
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-initialize HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                follow_redirects=True,
            )
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    def conditions_url(self, station_id: str) -> str:
        """URL of the conditions document for a station. Contains the API key."""
        base_url = self.config.base_url.rstrip("/")
        return f"{base_url}/{self.config.api_key}/conditions/q/pws:{station_id}.json"

    async def fetch_observation(self, station_id: str) -> RawObservation:
        """Fetch the latest observation for a station.

        The response is returned as decoded; whether it actually belongs to
        the requested station is left to the normalizer.

        Args:
            station_id: Personal weather station ID (e.g., "KCASANFR70").

        Returns:
            Decoded conditions response.

        Raises:
            FetchError: On transport failure, non-200 status or an undecodable body.
        """
        try:
            response = await self.http_client.get(self.conditions_url(station_id))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # The request URL embeds the API key, so only the error type is reported
            raise FetchError(station_id, FetchErrorKind.NETWORK, type(e).__name__) from e

        if response.status_code != 200:
            raise FetchError(
                station_id, FetchErrorKind.NETWORK, f"HTTP {response.status_code}"
            )

        try:
            return RawObservation.model_validate_json(response.content)
        except ValidationError as e:
            raise FetchError(
                station_id,
                FetchErrorKind.DECODE,
                f"{e.error_count()} validation error(s), first: {e.errors()[0]['msg']}",
            ) from e
