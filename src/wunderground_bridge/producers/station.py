"""Per-station producer: fetch, normalize and fan out one station's observations."""

import logging

from ..clients.wunderground import WundergroundClient
from ..config import WundergroundConfig
from ..errors import FetchError, StationMismatchError
from ..normalizer import normalize
from ..outputs.fanout import FanoutPublisher
from .base import BaseProducer

logger = logging.getLogger(__name__)


class StationProducer(BaseProducer):
    """Producer for a single personal weather station.

    Each station gets its own instance and task; instances share only the
    HTTP client and the two sinks behind the fan-out publisher.
    """

    def __init__(
        self,
        station_id: str,
        client: WundergroundClient,
        publisher: FanoutPublisher,
        config: WundergroundConfig | None = None,
    ) -> None:
        self.station_id = station_id
        self.client = client
        self.publisher = publisher
        self.config = config or client.config

    @property
    def name(self) -> str:
        return self.station_id

    @property
    def interval_seconds(self) -> float:
        return self.config.fetch_interval_seconds

    async def run_once(self) -> bool:
        """Fetch the latest observation and publish its valid fields.

        Fetch failures and responses for another station end the cycle
        without publishing anything; previously published values stay.

        Returns:
            True if the observation was published.
        """
        logger.info("%s: Fetching latest observation", self.station_id)

        try:
            raw = await self.client.fetch_observation(self.station_id)
        except FetchError as e:
            logger.warning("%s: Failed to fetch observation: %s", self.station_id, e)
            return False

        try:
            fields = normalize(self.station_id, raw)
        except StationMismatchError as e:
            logger.warning("%s: Discarding observation: %s", self.station_id, e)
            return False

        self.publisher.publish(self.station_id, fields)
        return True
