"""
Stream transports.

A transport performs the handshake with the receiving computer and
reports who is connected and how fast the link is. The handshakes here
are simulated; real WebRTC/virtual camera plumbing sits behind the same
interface.
"""
import asyncio
import random
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..core.config import TransportKind, WebcamConfig
from ..core.errors import StreamConnectionError

logger = logging.getLogger(__name__)

DEFAULT_DEVICES = ["Desktop PC", "Laptop", "Tablet"]


@dataclass(frozen=True)
class LinkInfo:
    """Result of a successful handshake."""
    peers: List[str] = field(default_factory=list)
    latency_ms: float = 0.0


class Transport(ABC):
    """Channel that carries the outbound video stream."""

    kind: TransportKind

    @abstractmethod
    async def connect(self, config: WebcamConfig) -> LinkInfo:
        """
        Handshake with the receiving device.

        Raises:
            StreamConnectionError: handshake failed
        """

    @abstractmethod
    async def disconnect(self):
        """Tear the link down. Safe to call when not connected."""

    @abstractmethod
    async def discover(self) -> List[str]:
        """List devices reachable over this transport."""


class SimulatedTransport(Transport):
    """Timer-driven handshake with a configurable success rate."""

    HANDSHAKE_DELAY = 0.0
    SUCCESS_RATE = 1.0
    LATENCY_RANGE: Tuple[float, float] = (20.0, 60.0)

    def __init__(
        self,
        handshake_delay: Optional[float] = None,
        success_rate: Optional[float] = None,
        devices: Optional[List[str]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.handshake_delay = self.HANDSHAKE_DELAY if handshake_delay is None else handshake_delay
        self.success_rate = self.SUCCESS_RATE if success_rate is None else success_rate
        self.devices = list(DEFAULT_DEVICES if devices is None else devices)
        self.rng = rng or random.Random()
        self.connected = False

    async def connect(self, config: WebcamConfig) -> LinkInfo:
        logger.info(f"Attempting {self.kind.value.upper()} connection ({config.resolution.value}@{config.frame_rate}fps)...")
        if self.handshake_delay:
            await asyncio.sleep(self.handshake_delay)

        if not self.devices:
            raise StreamConnectionError(f"No receiving device found over {self.kind.value}")
        if self.rng.random() >= self.success_rate:
            raise StreamConnectionError(f"{self.kind.value.upper()} handshake failed")

        low, high = self.LATENCY_RANGE
        self.connected = True
        info = LinkInfo(peers=[self.devices[0]], latency_ms=round(self.rng.uniform(low, high), 1))
        logger.info(f"{self.kind.value.upper()} connection established to {info.peers[0]}")
        return info

    async def disconnect(self):
        self.connected = False

    async def discover(self) -> List[str]:
        return list(self.devices)


class WifiTransport(SimulatedTransport):
    """Local network stream; always succeeds."""
    kind = TransportKind.WIFI
    HANDSHAKE_DELAY = 1.5
    SUCCESS_RATE = 1.0
    LATENCY_RANGE = (20.0, 60.0)


class UsbTransport(SimulatedTransport):
    """Tethered stream; lower latency, flakier handshake."""
    kind = TransportKind.USB
    HANDSHAKE_DELAY = 3.0
    SUCCESS_RATE = 0.8
    LATENCY_RANGE = (8.0, 20.0)


def default_transports(rng: Optional[random.Random] = None) -> Dict[TransportKind, Transport]:
    return {
        TransportKind.WIFI: WifiTransport(rng=rng),
        TransportKind.USB: UsbTransport(rng=rng),
    }
