"""
Stream Session Controller.

Lifecycle of the outbound webcam stream to a paired computer:

    inactive -> starting -> active -> inactive
                 |
                 +-> inactive (handshake failed or stopped)

The transport is fixed for the lifetime of a session; switching it means
stopping and starting again.
"""
import time
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..core.config import TransportKind, WebcamConfig, coerce_enum
from ..core.errors import AlreadyActiveError, ConfigurationError, StreamConnectionError
from ..core.observers import Observable
from .transports import Transport, default_transports

logger = logging.getLogger(__name__)


class StreamState(Enum):
    INACTIVE = "inactive"
    STARTING = "starting"
    ACTIVE = "active"


class StreamQuality(Enum):
    POOR = "poor"
    GOOD = "good"
    EXCELLENT = "excellent"


def quality_for_latency(latency_ms: float) -> StreamQuality:
    if latency_ms < 40:
        return StreamQuality.EXCELLENT
    if latency_ms < 100:
        return StreamQuality.GOOD
    return StreamQuality.POOR


@dataclass(frozen=True)
class StreamSession:
    """Snapshot of the stream session."""
    state: StreamState = StreamState.INACTIVE
    transport: TransportKind = TransportKind.WIFI
    connected_peers: Tuple[str, ...] = ()
    quality: StreamQuality = StreamQuality.POOR
    latency_ms: float = 0.0
    started_at: Optional[float] = None

    @property
    def active(self) -> bool:
        return self.state == StreamState.ACTIVE


class StreamSessionController:
    """Owns the single StreamSession and the webcam config."""

    def __init__(
        self,
        config: Optional[WebcamConfig] = None,
        transports: Optional[Dict[TransportKind, Transport]] = None,
    ):
        self._config = config or WebcamConfig()
        self._transports = transports if transports is not None else default_transports()
        self._session = StreamSession(transport=self._config.transport)
        self._link: Optional[Transport] = None
        self._generation = 0
        self._changes: Observable = Observable()

    @property
    def state(self) -> StreamState:
        return self._session.state

    def get_state(self) -> StreamSession:
        return self._session

    def get_config(self) -> WebcamConfig:
        return self._config

    def subscribe(self, callback: Callable[[StreamSession], None]) -> Callable[[], None]:
        return self._changes.subscribe(callback)

    def _set_session(self, session: StreamSession):
        self._session = session
        self._changes.notify(session)

    def _transport_for(self, kind: TransportKind) -> Transport:
        transport = self._transports.get(kind)
        if transport is None:
            raise ConfigurationError(f"No {kind.value} transport available")
        return transport

    async def start(self, transport: Any = None) -> StreamSession:
        """
        Start streaming.

        Args:
            transport: Transport for this session; defaults to the configured one

        Returns:
            Session snapshot (inactive if stop() ran during the handshake)

        Raises:
            AlreadyActiveError: a session is starting or active
            StreamConnectionError: handshake failed
        """
        if self._session.state != StreamState.INACTIVE:
            raise AlreadyActiveError(f"Stream already {self._session.state.value}")

        kind = self._config.transport if transport is None else coerce_enum(TransportKind, transport, "transport")
        link = self._transport_for(kind)
        config = self._config

        self._generation += 1
        generation = self._generation
        self._set_session(StreamSession(state=StreamState.STARTING, transport=kind))
        logger.info(f"Starting stream via {kind.value.upper()}")

        try:
            info = await link.connect(config)
        except asyncio.CancelledError:
            if generation == self._generation:
                self._set_session(StreamSession(transport=kind))
            raise
        except Exception as e:
            if generation != self._generation:
                logger.info(f"Stream stopped during handshake, ignoring failure: {e}")
                return self._session
            self._set_session(StreamSession(transport=kind))
            logger.error(f"Failed to start webcam stream: {e}")
            if isinstance(e, StreamConnectionError):
                raise
            raise StreamConnectionError(f"{kind.value.upper()} handshake failed: {e}") from e

        if generation != self._generation:
            logger.info("Stream stopped during handshake, closing link")
            await link.disconnect()
            return self._session

        self._link = link
        self._set_session(StreamSession(
            state=StreamState.ACTIVE,
            transport=kind,
            connected_peers=tuple(info.peers),
            quality=quality_for_latency(info.latency_ms),
            latency_ms=info.latency_ms,
            started_at=time.time(),
        ))
        logger.info(f"Streaming to {', '.join(info.peers)} ({info.latency_ms:.0f}ms)")
        return self._session

    async def stop(self) -> StreamSession:
        """Stop streaming from any state."""
        self._generation += 1
        link, self._link = self._link, None
        was = self._session.state
        self._set_session(StreamSession(transport=self._session.transport))

        if link is not None:
            try:
                await link.disconnect()
            except Exception as e:
                logger.warning(f"Transport disconnect error: {e}")

        if was != StreamState.INACTIVE:
            logger.info("Stream stopped")
        return self._session

    def reconfigure(self, changes: Optional[Dict[str, Any]] = None, **kwargs: Any) -> WebcamConfig:
        """
        Merge changes into the retained config.

        An active session keeps running with the config it started with;
        changes apply on the next start.
        """
        merged = dict(changes or {})
        merged.update(kwargs)
        self._config = self._config.merged(merged)
        logger.info(f"Webcam config updated: {self._config}")
        return self._config

    async def switch_transport(self, transport: Any) -> StreamSession:
        """
        Change the transport; an active session is restarted on it.

        Raises:
            AlreadyActiveError: a session is mid-handshake
        """
        kind = coerce_enum(TransportKind, transport, "transport")
        if self._session.state == StreamState.STARTING:
            raise AlreadyActiveError("Cannot switch transport while the stream is starting")

        self._config = self._config.merged({"transport": kind})
        if self._session.state == StreamState.ACTIVE and self._session.transport != kind:
            await self.stop()
            return await self.start(kind)
        return self._session

    async def get_available_devices(self) -> List[str]:
        return await self._transport_for(self._config.transport).discover()
