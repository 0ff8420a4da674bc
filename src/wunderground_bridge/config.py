"""Configuration settings loaded from environment variables."""

import socket
from datetime import datetime
from urllib.parse import urlsplit

from pydantic import Field
from pydantic_settings import BaseSettings

TLS_SCHEMES = {"ssl", "tls", "mqtts"}
DEFAULT_MQTT_PORTS = {"tcp": 1883, "mqtt": 1883, "ssl": 8883, "tls": 8883, "mqtts": 8883}


def default_client_id() -> str:
    """Hostname suffixed with the current second, as used by older deployments."""
    return f"{socket.gethostname()}{datetime.now().second}"


class MQTTConfig(BaseSettings):
    """MQTT broker connection configuration."""

    server: str = "tcp://127.0.0.1:1883"
    client_id: str = Field(default_factory=default_client_id)
    username: str = ""
    password: str = ""
    namespace: str = "weather_underground"
    qos: int = Field(default=0, ge=0, le=2)
    keepalive_seconds: int = 30
    max_reconnect_delay_seconds: int = 1
    connect_timeout_seconds: float = 10.0

    model_config = {"env_prefix": "MQTT_"}

    def get_host_port(self) -> tuple[str, int]:
        """Split the server URL into host and port, filling in the scheme default."""
        parts = urlsplit(self.server)
        scheme = parts.scheme.lower() or "tcp"
        if scheme not in DEFAULT_MQTT_PORTS:
            raise ValueError(f"Unsupported MQTT scheme: {parts.scheme}")
        host = parts.hostname or "127.0.0.1"
        return host, parts.port or DEFAULT_MQTT_PORTS[scheme]

    def uses_tls(self) -> bool:
        """Whether the server URL asks for a TLS connection."""
        return urlsplit(self.server).scheme.lower() in TLS_SCHEMES


class WundergroundConfig(BaseSettings):
    """Weather Underground API configuration."""

    api_key: str = ""
    station_ids: str = ""  # Comma-separated PWS IDs
    base_url: str = "http://api.wunderground.com/api"
    fetch_interval_seconds: int = Field(default=1200, gt=0)  # 20 minutes
    timeout_seconds: float = 30.0

    model_config = {"env_prefix": "WUNDERGROUND_"}

    def get_station_ids_list(self) -> list[str]:
        """Parse station_ids string into list."""
        if not self.station_ids.strip():
            return []
        return [s.strip() for s in self.station_ids.split(",") if s.strip()]


class MetricsConfig(BaseSettings):
    """Prometheus scrape endpoint configuration."""

    enabled: bool = True
    port: int = 8080
    addr: str = ""  # Bind address, empty = all interfaces

    model_config = {"env_prefix": "METRICS_"}


class Settings(BaseSettings):
    """Application settings combining all configs."""

    log_level: str = "INFO"
    mqtt: MQTTConfig = MQTTConfig()
    wunderground: WundergroundConfig = WundergroundConfig()
    metrics: MetricsConfig = MetricsConfig()


def get_settings() -> Settings:
    """Load settings from environment."""
    return Settings()
