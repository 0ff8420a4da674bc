"""Exception types raised while ingesting and republishing observations."""

from enum import Enum


class BridgeError(Exception):
    """Base class for all bridge errors."""


class FetchErrorKind(str, Enum):
    """Why an observation fetch failed."""

    NETWORK = "network"  # Transport failure or non-200 status
    DECODE = "decode"  # Body is not a conditions response


class FetchError(BridgeError):
    """Fetching an observation from the provider failed."""

    def __init__(self, station_id: str, kind: FetchErrorKind, message: str) -> None:
        super().__init__(f"{station_id}: {kind.value} error: {message}")
        self.station_id = station_id
        self.kind = kind
        self.message = message


class ObservationValidationError(BridgeError):
    """A fetched observation cannot be used as a whole."""


class StationMismatchError(ObservationValidationError):
    """The provider answered with a different station than requested."""

    def __init__(self, requested: str, received: str) -> None:
        super().__init__(f"requested station {requested!r} but response is for {received!r}")
        self.requested = requested
        self.received = received


class BusConnectionError(BridgeError):
    """The initial connection to the MQTT broker could not be established."""
