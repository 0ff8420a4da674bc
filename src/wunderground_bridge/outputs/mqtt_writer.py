"""MQTT writer for station observations."""

import logging
import ssl
import threading
from typing import Any, Callable, Protocol

import paho.mqtt.client as mqtt

from ..config import MQTTConfig
from ..errors import BusConnectionError
from .protocols import Payload

logger = logging.getLogger(__name__)


class MQTTClientProtocol(Protocol):
    """Protocol for the paho MQTT client to allow mocking."""

    on_connect: Callable[..., None] | None
    on_disconnect: Callable[..., None] | None

    def connect(self, host: str, port: int = 1883, keepalive: int = 60) -> Any:
        """Open the network connection and send CONNECT."""
        ...

    def loop_start(self) -> Any:
        """Start the network loop thread."""
        ...

    def loop_stop(self) -> Any:
        """Stop the network loop thread."""
        ...

    def disconnect(self) -> Any:
        """Send DISCONNECT and close the connection."""
        ...

    def publish(
        self,
        topic: str,
        payload: str | bytes | float | int | None = None,
        qos: int = 0,
        retain: bool = False,
    ) -> mqtt.MQTTMessageInfo:
        """Queue a message for publishing."""
        ...


def encode_payload(value: Payload) -> str:
    """Render a field value as message text. Numbers use their decimal form."""
    if isinstance(value, str):
        return value
    return str(value)


class MQTTWriter:
    """Publishes retained messages to an MQTT broker.

    The paho network loop runs in its own thread and handles reconnects, so
    `publish` may be called from any station task.
    """

    def __init__(
        self,
        config: MQTTConfig,
        client: MQTTClientProtocol | None = None,
    ) -> None:
        """Initialize MQTT writer.

        Args:
            config: MQTT configuration settings.
            client: Optional MQTT client for testing.
        """
        self.config = config
        self._client: MQTTClientProtocol | None = client
        self._connected = threading.Event()
        self._connect_reason: str | None = None

    @property
    def client(self) -> MQTTClientProtocol:
        """Lazy-initialize paho client from configuration."""
        if self._client is None:
            client = mqtt.Client(
                mqtt.CallbackAPIVersion.VERSION2,
                client_id=self.config.client_id,
                clean_session=True,
            )
            if self.config.username:
                client.username_pw_set(self.config.username, self.config.password or None)
            if self.config.uses_tls():
                # Server certificates are not verified
                client.tls_set(cert_reqs=ssl.CERT_NONE)
                client.tls_insecure_set(True)
            client.reconnect_delay_set(
                min_delay=1, max_delay=self.config.max_reconnect_delay_seconds
            )
            self._client = client  # type: ignore[assignment]
        assert self._client is not None
        return self._client

    def _on_connect(
        self, client: Any, userdata: Any, flags: Any, reason_code: Any, properties: Any = None
    ) -> None:
        """Callback for CONNACK."""
        if getattr(reason_code, "is_failure", False):
            self._connect_reason = str(reason_code)
            logger.error("MQTT connection refused: %s", reason_code)
        else:
            self._connect_reason = None
            logger.info("Connected to %s", self.config.server)
        self._connected.set()

    def _on_disconnect(
        self,
        client: Any,
        userdata: Any,
        flags: Any,
        reason_code: Any = None,
        properties: Any = None,
    ) -> None:
        """Callback for lost or closed connections."""
        logger.warning("Disconnected from MQTT broker: %s", reason_code)

    def connect(self) -> None:
        """Connect to the broker and wait for it to accept the session.

        Raises:
            BusConnectionError: If the broker is unreachable, refuses the
                session or does not answer within the connect timeout.
        """
        host, port = self.config.get_host_port()
        client = self.client
        client.on_connect = self._on_connect
        client.on_disconnect = self._on_disconnect
        self._connected.clear()

        try:
            client.connect(host, port, keepalive=self.config.keepalive_seconds)
        except (OSError, ValueError) as e:
            raise BusConnectionError(f"Cannot connect to {self.config.server}: {e}") from e

        client.loop_start()
        if not self._connected.wait(self.config.connect_timeout_seconds):
            client.loop_stop()
            raise BusConnectionError(
                f"No answer from {self.config.server} within "
                f"{self.config.connect_timeout_seconds:g} seconds"
            )
        if self._connect_reason is not None:
            client.loop_stop()
            raise BusConnectionError(
                f"{self.config.server} refused connection: {self._connect_reason}"
            )

    def publish(self, topic: str, payload: Payload) -> bool:
        """Publish a retained message.

        Failures are logged and reported through the return value only.

        Args:
            topic: Destination topic.
            payload: Number or text to send.

        Returns:
            True if the message was handed to the client for delivery.
        """
        try:
            info = self.client.publish(
                topic,
                payload=encode_payload(payload),
                qos=self.config.qos,
                retain=True,
            )
        except ValueError as e:
            logger.warning("Cannot publish to %s: %s", topic, e)
            return False

        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.warning("MQTT publish to %s failed: %s", topic, mqtt.error_string(info.rc))
            return False

        logger.debug("Published %s = %s", topic, payload)
        return True

    def close(self) -> None:
        """Disconnect from the broker and stop the network loop."""
        if self._client is None:
            return
        self._client.disconnect()
        self._client.loop_stop()
