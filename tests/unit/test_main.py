"""Unit tests for main entry point."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
import respx

from wunderground_bridge.clients.wunderground import WundergroundClient
from wunderground_bridge.config import MQTTConfig, Settings, WundergroundConfig
from wunderground_bridge.errors import BusConnectionError
from wunderground_bridge.main import (
    apply_args,
    main,
    parse_args,
    run_all_stations,
    run_station,
    setup_logging,
)
from wunderground_bridge.outputs.metrics import WeatherMetrics
from wunderground_bridge.schemas import FieldName


@pytest.fixture
def settings() -> Settings:
    """Settings for two stations."""
    return Settings(
        mqtt=MQTTConfig(server="tcp://broker.test:1883", client_id="test"),
        wunderground=WundergroundConfig(
            api_key="secret",
            station_ids="KCASANFR70,KCASANFR58",
            fetch_interval_seconds=3600,
        ),
    )


class TestParseArgs:
    def test_default_args(self):
        """Test default argument values."""
        args = parse_args([])

        assert args.server is None
        assert args.stations is None
        assert args.once is False
        assert args.log_level is None

    def test_broker_and_station_flags(self):
        """Test the broker and station flags."""
        args = parse_args(
            [
                "--server",
                "ssl://broker:8883",
                "--clientid",
                "bridge",
                "--username",
                "u",
                "--password",
                "p",
                "--apikey",
                "KEY",
                "--stations",
                "A,B",
            ]
        )

        assert args.server == "ssl://broker:8883"
        assert args.clientid == "bridge"
        assert args.username == "u"
        assert args.password == "p"
        assert args.apikey == "KEY"
        assert args.stations == "A,B"

    def test_once_and_interval(self):
        """Test --once and --interval."""
        args = parse_args(["--once", "--interval", "60", "--port", "9100"])

        assert args.once is True
        assert args.interval == 60
        assert args.port == 9100


class TestApplyArgs:
    def test_flags_override_settings(self, settings: Settings):
        """Test given flags replace environment values."""
        args = parse_args(
            [
                "--server",
                "tcp://other:1883",
                "--stations",
                "X",
                "--port",
                "9100",
                "--interval",
                "5",
            ]
        )

        result = apply_args(settings, args)

        assert result.mqtt.server == "tcp://other:1883"
        assert result.mqtt.client_id == "test"
        assert result.wunderground.get_station_ids_list() == ["X"]
        assert result.wunderground.api_key == "secret"
        assert result.wunderground.fetch_interval_seconds == 5
        assert result.metrics.port == 9100

    def test_no_flags_keep_settings(self, settings: Settings):
        """Test settings are unchanged without flags."""
        result = apply_args(settings, parse_args([]))

        assert result.mqtt == settings.mqtt
        assert result.wunderground == settings.wunderground
        assert result.log_level == "INFO"

    def test_log_level(self, settings: Settings):
        """Test --log-level overrides LOG_LEVEL."""
        result = apply_args(settings, parse_args(["--log-level", "DEBUG"]))

        assert result.log_level == "DEBUG"


class TestSetupLogging:
    def test_setup_logging_info(self):
        """Test logging setup with INFO level."""
        setup_logging("INFO")

    def test_setup_logging_debug(self):
        """Test logging setup with DEBUG level."""
        setup_logging("DEBUG")


class TestRunStation:
    @pytest.mark.asyncio
    async def test_run_station_once(self):
        """Test running a station once."""
        mock_producer = AsyncMock()
        mock_producer.name = "S1"
        shutdown_event = asyncio.Event()

        await run_station(mock_producer, shutdown_event, run_once=True)

        mock_producer.run_once.assert_called_once()
        mock_producer.run_forever.assert_not_called()
        mock_producer.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_run_station_continuous(self):
        """Test continuous mode hands the shutdown event to the loop."""
        mock_producer = AsyncMock()
        mock_producer.name = "S1"
        mock_producer.interval_seconds = 1200
        shutdown_event = asyncio.Event()

        await run_station(mock_producer, shutdown_event, run_once=False)

        mock_producer.run_forever.assert_called_once_with(shutdown_event)
        mock_producer.close.assert_called_once()


class TestRunAllStations:
    @respx.mock
    @pytest.mark.asyncio
    async def test_run_all_once(self, settings: Settings, conditions_data: dict):
        """Test every station runs one cycle against the shared sinks."""
        respx.get(
            "http://api.wunderground.com/api/secret/conditions/q/pws:KCASANFR70.json"
        ).mock(return_value=httpx.Response(200, json=conditions_data))
        respx.get(
            "http://api.wunderground.com/api/secret/conditions/q/pws:KCASANFR58.json"
        ).mock(return_value=httpx.Response(503))
        bus = MagicMock()
        bus.publish = MagicMock(return_value=True)
        metrics = MagicMock()

        await asyncio.wait_for(
            run_all_stations(settings, bus, metrics, run_once=True), timeout=5
        )

        assert bus.publish.call_count == 8
        assert all("/KCASANFR70/" in c.args[0] for c in bus.publish.call_args_list)
        metrics.set.assert_any_call(FieldName.TEMPERATURE, "KCASANFR70", 19.1)

    @pytest.mark.asyncio
    async def test_no_stations(self, settings: Settings):
        """Test nothing runs without stations."""
        settings.wunderground.station_ids = ""
        client = AsyncMock()

        await run_all_stations(settings, MagicMock(), MagicMock(), client=client)

        client.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_shutdown_cancels_stations(self, settings: Settings):
        """Test setting the shutdown event stops continuous polling."""
        import wunderground_bridge.main as main_module

        started = asyncio.Event()

        async def slow_fetch(station_id: str):
            started.set()
            await asyncio.sleep(3600)

        client = AsyncMock(spec=WundergroundClient)
        client.config = settings.wunderground
        client.fetch_observation = AsyncMock(side_effect=slow_fetch)

        async def trigger_shutdown():
            await started.wait()
            main_module._shutdown_event.set()

        await asyncio.wait_for(
            asyncio.gather(
                run_all_stations(settings, MagicMock(), MagicMock(), client=client),
                trigger_shutdown(),
            ),
            timeout=5,
        )

        client.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_sinks_shared_between_stations(self, settings: Settings):
        """Test gauges for all stations land in the same registry."""
        from prometheus_client import CollectorRegistry

        from wunderground_bridge.schemas import RawObservation

        metrics = WeatherMetrics(registry=CollectorRegistry())

        async def fetch(station_id: str) -> RawObservation:
            return RawObservation.model_validate(
                {
                    "current_observation": {
                        "station_id": station_id,
                        "temp_c": 10.0 if station_id == "KCASANFR70" else 20.0,
                        "wind_degrees": 0,
                        "wind_kph": 1.0,
                    }
                }
            )

        client = AsyncMock(spec=WundergroundClient)
        client.config = settings.wunderground
        client.fetch_observation = AsyncMock(side_effect=fetch)
        bus = MagicMock()
        bus.publish = MagicMock(return_value=True)

        await run_all_stations(settings, bus, metrics, run_once=True, client=client)

        assert metrics.get(FieldName.TEMPERATURE, "KCASANFR70") == 10.0
        assert metrics.get(FieldName.TEMPERATURE, "KCASANFR58") == 20.0
        assert metrics.get(FieldName.WIND_DEGREES, "KCASANFR58") == 0.0


class TestMain:
    def test_missing_api_key_exits(self, monkeypatch: pytest.MonkeyPatch):
        """Test startup fails without API key."""
        monkeypatch.delenv("WUNDERGROUND_API_KEY", raising=False)

        with pytest.raises(SystemExit) as exc_info:
            main(["--stations", "S1"])

        assert exc_info.value.code == 2

    def test_missing_stations_exits(self, monkeypatch: pytest.MonkeyPatch):
        """Test startup fails without stations."""
        monkeypatch.delenv("WUNDERGROUND_STATION_IDS", raising=False)

        with pytest.raises(SystemExit) as exc_info:
            main(["--apikey", "KEY"])

        assert exc_info.value.code == 2

    def test_bus_connection_failure_is_fatal(self):
        """Test startup aborts when the broker cannot be reached."""
        with patch("wunderground_bridge.main.MQTTWriter") as mock_writer_cls, patch(
            "wunderground_bridge.main.start_metrics_server"
        ) as mock_server, patch("wunderground_bridge.main.asyncio.run") as mock_run:
            mock_writer_cls.return_value.connect.side_effect = BusConnectionError("refused")

            with pytest.raises(SystemExit) as exc_info:
                main(["--apikey", "KEY", "--stations", "S1"])

        assert exc_info.value.code == 1
        mock_server.assert_not_called()
        mock_run.assert_not_called()

    def test_metrics_port_in_use_is_fatal(self):
        """Test startup aborts and the bus is closed when the metrics port is taken."""
        with patch("wunderground_bridge.main.MQTTWriter") as mock_writer_cls, patch(
            "wunderground_bridge.main.start_metrics_server",
            side_effect=OSError("Address already in use"),
        ), patch("wunderground_bridge.main.asyncio.run") as mock_run:
            with pytest.raises(SystemExit) as exc_info:
                main(["--apikey", "KEY", "--stations", "S1"])

        assert exc_info.value.code == 1
        mock_writer_cls.return_value.close.assert_called_once()
        mock_run.assert_not_called()

    def test_successful_startup(self):
        """Test connect, metrics server and station loop are started in order."""
        with patch("wunderground_bridge.main.MQTTWriter") as mock_writer_cls, patch(
            "wunderground_bridge.main.WeatherMetrics"
        ), patch("wunderground_bridge.main.start_metrics_server") as mock_server, patch(
            "wunderground_bridge.main.run_all_stations", new=MagicMock()
        ), patch("wunderground_bridge.main.asyncio.run") as mock_run:
            with pytest.raises(SystemExit) as exc_info:
                main(["--apikey", "KEY", "--stations", "S1", "--port", "9100", "--once"])

        assert exc_info.value.code == 0
        mock_writer_cls.return_value.connect.assert_called_once()
        mock_server.assert_called_once_with(9100, "")
        mock_run.assert_called_once()
        mock_writer_cls.return_value.close.assert_called_once()
