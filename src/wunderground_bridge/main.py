"""Main entry point for the Weather Underground to MQTT bridge."""

import argparse
import asyncio
import logging
import signal
import sys
from typing import NoReturn

from . import __version__
from .clients import WundergroundClient
from .config import Settings, get_settings
from .errors import BusConnectionError
from .outputs import FanoutPublisher, MQTTWriter, WeatherMetrics, start_metrics_server
from .outputs.protocols import BusWriter, MetricsSink
from .producers import BaseProducer, StationProducer

logger = logging.getLogger(__name__)

_shutdown_event: asyncio.Event | None = None


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Reduce noise from httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def handle_shutdown(signum: int, frame: object) -> None:
    """Handle shutdown signals."""
    sig_name = signal.Signals(signum).name
    logger.info("Received %s, exiting", sig_name)
    if _shutdown_event:
        _shutdown_event.set()


async def run_station(
    producer: BaseProducer,
    shutdown_event: asyncio.Event,
    run_once: bool = False,
) -> None:
    """Run a single station producer until shutdown.

    Args:
        producer: The producer to run.
        shutdown_event: Event to signal shutdown.
        run_once: If True, run one cycle and exit instead of polling.
    """
    try:
        if run_once:
            logger.info("%s: Running once", producer.name)
            await producer.run_once()
        else:
            logger.info(
                "%s: Polling every %d seconds", producer.name, producer.interval_seconds
            )
            await producer.run_forever(shutdown_event)
    finally:
        await producer.close()


async def run_all_stations(
    settings: Settings,
    bus: BusWriter,
    metrics: MetricsSink,
    run_once: bool = False,
    client: WundergroundClient | None = None,
) -> None:
    """Run one producer task per configured station.

    On shutdown the station tasks are cancelled right away; in-flight
    fetches and publishes are abandoned.

    Args:
        settings: Application settings.
        bus: Connected writer for retained messages.
        metrics: Shared gauge registry.
        run_once: If True, run each station once and exit.
        client: Optional provider client, created from settings if omitted.
    """
    global _shutdown_event
    _shutdown_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, lambda s=sig: handle_shutdown(s, None))

    station_ids = settings.wunderground.get_station_ids_list()
    if not station_ids:
        logger.warning("No stations configured")
        return

    client = client or WundergroundClient(settings.wunderground)
    publisher = FanoutPublisher(bus, metrics, settings.mqtt.namespace)

    logger.info("Starting stations: %s", ", ".join(station_ids))
    tasks: list[asyncio.Task] = [
        asyncio.create_task(
            run_station(
                StationProducer(station_id, client, publisher, settings.wunderground),
                _shutdown_event,
                run_once,
            ),
            name=station_id,
        )
        for station_id in station_ids
    ]
    waiter = asyncio.create_task(_shutdown_event.wait(), name="shutdown")

    try:
        pending: set[asyncio.Task] = set(tasks)
        while pending and not _shutdown_event.is_set():
            _, pending = await asyncio.wait(
                pending | {waiter}, return_when=asyncio.FIRST_COMPLETED
            )
            pending.discard(waiter)
    finally:
        for task in [*tasks, waiter]:
            if not task.done():
                task.cancel()
        results = await asyncio.gather(*tasks, waiter, return_exceptions=True)
        await client.close()

    for task, result in zip(tasks, results):
        if isinstance(result, Exception):
            logger.error("%s: Stopped with error: %s", task.get_name(), result)

    logger.info("All stations stopped")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Weather Underground to MQTT and Prometheus bridge",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Poll two stations every 20 minutes
  wunderground-bridge --apikey KEY --stations KCASANFR70,KCASANFR58

  # Publish to a TLS broker with credentials
  wunderground-bridge --server ssl://broker:8883 --username u --password p ...

  # Run one cycle per station and exit
  wunderground-bridge --once

Environment Variables:
  MQTT_SERVER                  Broker URL (default: tcp://127.0.0.1:1883)
  MQTT_NAMESPACE               First topic segment (default: weather_underground)
  WUNDERGROUND_API_KEY         Weather Underground API key
  WUNDERGROUND_STATION_IDS     Comma-separated station IDs
  METRICS_PORT                 Prometheus scrape port (default: 8080)
        """,
    )

    parser.add_argument(
        "--server",
        help="The full url of the MQTT server to connect to ex: tcp://127.0.0.1:1883",
    )
    parser.add_argument("--clientid", help="A clientid for the connection")
    parser.add_argument("--username", help="A username to authenticate to the MQTT server")
    parser.add_argument("--password", help="Password to match username")
    parser.add_argument("--apikey", help="Weather Underground API key")
    parser.add_argument("--stations", help="Comma separated list of stations")
    parser.add_argument("--port", type=int, help="Port serving /metrics (default: 8080)")
    parser.add_argument(
        "--interval",
        type=int,
        help="Seconds between fetches per station (default: 1200)",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run each station once and exit",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser.parse_args(argv)


def apply_args(settings: Settings, args: argparse.Namespace) -> Settings:
    """Overlay command line flags on settings loaded from the environment."""
    mqtt_updates = {
        key: value
        for key, value in (
            ("server", args.server),
            ("client_id", args.clientid),
            ("username", args.username),
            ("password", args.password),
        )
        if value is not None
    }
    wunderground_updates = {
        key: value
        for key, value in (
            ("api_key", args.apikey),
            ("station_ids", args.stations),
            ("fetch_interval_seconds", args.interval),
        )
        if value is not None
    }
    metrics_updates = {"port": args.port} if args.port is not None else {}

    updates: dict[str, object] = {
        "mqtt": settings.mqtt.model_copy(update=mqtt_updates),
        "wunderground": settings.wunderground.model_copy(update=wunderground_updates),
        "metrics": settings.metrics.model_copy(update=metrics_updates),
    }
    if args.log_level is not None:
        updates["log_level"] = args.log_level
    return settings.model_copy(update=updates)


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point."""
    args = parse_args(argv)
    settings = apply_args(get_settings(), args)

    setup_logging(settings.log_level)

    if not settings.wunderground.api_key:
        logger.error("No API key given. Set --apikey or WUNDERGROUND_API_KEY")
        sys.exit(2)
    if not settings.wunderground.get_station_ids_list():
        logger.error("No stations given. Set --stations or WUNDERGROUND_STATION_IDS")
        sys.exit(2)
    if settings.wunderground.fetch_interval_seconds <= 0:
        logger.error("Fetch interval must be positive")
        sys.exit(2)

    writer = MQTTWriter(settings.mqtt)
    try:
        writer.connect()
    except (BusConnectionError, ValueError) as e:
        logger.critical("%s", e)
        sys.exit(1)

    metrics = WeatherMetrics()
    if settings.metrics.enabled:
        try:
            start_metrics_server(settings.metrics.port, settings.metrics.addr)
        except OSError as e:
            logger.critical("Cannot serve metrics on port %d: %s", settings.metrics.port, e)
            writer.close()
            sys.exit(1)

    try:
        asyncio.run(
            run_all_stations(
                settings=settings,
                bus=writer,
                metrics=metrics,
                run_once=args.once,
            )
        )
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        writer.close()

    logger.info("Shutdown complete")
    sys.exit(0)


if __name__ == "__main__":
    main()
