"""
Stream Session Controller Tests.
Tests the inactive -> starting -> active lifecycle, misuse rejection,
transport switching and config round-trips.
"""
import asyncio
import random

import pytest

from phonecam.core.config import CameraFacing, Resolution, TransportKind, WebcamConfig
from phonecam.core.errors import AlreadyActiveError, ConfigurationError, StreamConnectionError
from phonecam.webcam import (
    StreamQuality,
    StreamSessionController,
    StreamState,
    UsbTransport,
    WifiTransport,
    quality_for_latency,
)

pytestmark = pytest.mark.asyncio


def make_controller(wifi_delay=0.0, usb_delay=0.0, usb_success=1.0, config=None):
    rng = random.Random(42)
    transports = {
        TransportKind.WIFI: WifiTransport(handshake_delay=wifi_delay, rng=rng),
        TransportKind.USB: UsbTransport(handshake_delay=usb_delay, success_rate=usb_success, rng=rng),
    }
    return StreamSessionController(config=config, transports=transports), transports


class TestLifecycle:
    """Test start/stop transitions."""

    async def test_start_populates_session(self):
        controller, _ = make_controller()
        session = await controller.start()

        assert session.state == StreamState.ACTIVE
        assert session.active is True
        assert session.transport == TransportKind.WIFI
        assert session.connected_peers == ("Desktop PC",)
        assert 20 <= session.latency_ms <= 60
        assert session.quality == quality_for_latency(session.latency_ms)
        await controller.stop()

    async def test_state_passes_through_starting(self):
        controller, _ = make_controller()
        states = []
        controller.subscribe(lambda s: states.append(s.state))

        await controller.start()
        await controller.stop()

        assert states == [StreamState.STARTING, StreamState.ACTIVE, StreamState.INACTIVE]

    async def test_stop_clears_peers(self):
        controller, transports = make_controller()
        await controller.start()
        session = await controller.stop()

        assert session.state == StreamState.INACTIVE
        assert session.connected_peers == ()
        assert transports[TransportKind.WIFI].connected is False

    async def test_stop_when_inactive_is_harmless(self):
        controller, _ = make_controller()
        session = await controller.stop()
        assert session.state == StreamState.INACTIVE

    async def test_snapshot_is_a_copy(self):
        controller, _ = make_controller()
        before = controller.get_state()
        await controller.start()
        assert before.state == StreamState.INACTIVE
        await controller.stop()


class TestMisuse:
    """Concurrent start() is rejected, not coalesced."""

    async def test_start_while_active_rejected(self):
        controller, _ = make_controller()
        await controller.start()
        before = controller.get_state()

        with pytest.raises(AlreadyActiveError):
            await controller.start()

        assert controller.get_state() == before
        await controller.stop()

    async def test_start_while_starting_rejected(self):
        controller, _ = make_controller(wifi_delay=0.05)
        first = asyncio.create_task(controller.start())
        await asyncio.sleep(0.01)
        assert controller.state == StreamState.STARTING

        with pytest.raises(AlreadyActiveError):
            await controller.start()
        assert controller.state == StreamState.STARTING

        session = await first
        assert session.state == StreamState.ACTIVE
        await controller.stop()


class TestHandshakeFailure:
    """Failed handshakes return to inactive."""

    async def test_failure_raises_connection_error(self):
        controller, _ = make_controller(usb_success=0.0)

        with pytest.raises(StreamConnectionError):
            await controller.start(TransportKind.USB)

        assert controller.state == StreamState.INACTIVE

    async def test_connection_error_is_builtin_connection_error(self):
        controller, _ = make_controller(usb_success=0.0)
        with pytest.raises(ConnectionError):
            await controller.start("usb")

    async def test_no_devices_fails(self):
        controller = StreamSessionController(transports={TransportKind.WIFI: WifiTransport(handshake_delay=0, devices=[])})
        with pytest.raises(StreamConnectionError):
            await controller.start()
        assert controller.state == StreamState.INACTIVE

    async def test_start_possible_after_failure(self):
        controller, _ = make_controller(usb_success=0.0)
        with pytest.raises(StreamConnectionError):
            await controller.start(TransportKind.USB)

        session = await controller.start(TransportKind.WIFI)
        assert session.active
        await controller.stop()

    async def test_stop_during_handshake_discards_result(self):
        controller, transports = make_controller(wifi_delay=0.05)
        task = asyncio.create_task(controller.start())
        await asyncio.sleep(0.01)

        await controller.stop()
        session = await task

        assert session.state == StreamState.INACTIVE
        assert controller.state == StreamState.INACTIVE
        assert transports[TransportKind.WIFI].connected is False

    async def test_failure_after_stop_is_not_raised(self):
        controller, _ = make_controller(usb_delay=0.05, usb_success=0.0)
        task = asyncio.create_task(controller.start(TransportKind.USB))
        await asyncio.sleep(0.01)

        await controller.stop()
        session = await task

        assert session.state == StreamState.INACTIVE
        assert controller.state == StreamState.INACTIVE


class TestTransportSwitch:
    """Transport identity is fixed per session."""

    async def test_switch_restarts_active_session(self):
        controller, transports = make_controller()
        states = []
        await controller.start()
        controller.subscribe(lambda s: states.append((s.state, s.transport)))

        session = await controller.switch_transport("usb")

        assert session.active
        assert session.transport == TransportKind.USB
        assert transports[TransportKind.WIFI].connected is False
        assert (StreamState.INACTIVE, TransportKind.WIFI) in states
        assert controller.get_config().transport == TransportKind.USB
        await controller.stop()

    async def test_switch_when_inactive_updates_config(self):
        controller, _ = make_controller()
        session = await controller.switch_transport(TransportKind.USB)

        assert session.state == StreamState.INACTIVE
        assert controller.get_config().transport == TransportKind.USB

        session = await controller.start()
        assert session.transport == TransportKind.USB
        await controller.stop()

    async def test_switch_while_starting_rejected(self):
        controller, _ = make_controller(wifi_delay=0.05)
        task = asyncio.create_task(controller.start())
        await asyncio.sleep(0.01)

        with pytest.raises(AlreadyActiveError):
            await controller.switch_transport("usb")

        await task
        await controller.stop()


class TestConfig:
    """reconfigure()/get_config() round-trips."""

    async def test_reconfigure_frame_rate_round_trip(self):
        controller, _ = make_controller()
        controller.reconfigure({"frame_rate": 60})

        config = controller.get_config()
        assert config.frame_rate == 60
        assert config.resolution == Resolution.FULL_HD
        assert config.transport == TransportKind.WIFI
        assert config.facing == CameraFacing.FRONT

    async def test_reconfigure_keyword_form(self):
        controller, _ = make_controller()
        config = controller.reconfigure(resolution="4K", facing="back")
        assert config.resolution == Resolution.UHD
        assert config.facing == CameraFacing.BACK
        assert config.frame_rate == 30

    async def test_reconfigure_does_not_restart_active_session(self):
        controller, _ = make_controller()
        session = await controller.start()
        controller.reconfigure(transport="usb", frame_rate=60)

        assert controller.get_state() == session
        assert controller.get_state().transport == TransportKind.WIFI
        await controller.stop()

        session = await controller.start()
        assert session.transport == TransportKind.USB
        await controller.stop()

    @pytest.mark.parametrize("changes", [{"frame_rate": 24}, {"resolution": "8K"}, {"bitrate": 5}])
    async def test_invalid_changes_rejected(self, changes):
        controller, _ = make_controller()
        with pytest.raises(ConfigurationError):
            controller.reconfigure(changes)
        assert controller.get_config() == WebcamConfig()

    async def test_available_devices(self):
        controller, _ = make_controller()
        assert await controller.get_available_devices() == ["Desktop PC", "Laptop", "Tablet"]


class TestQuality:
    async def test_quality_bands(self):
        assert quality_for_latency(25) == StreamQuality.EXCELLENT
        assert quality_for_latency(50) == StreamQuality.GOOD
        assert quality_for_latency(150) == StreamQuality.POOR
