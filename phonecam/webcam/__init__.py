"""
Webcam streaming.
"""
from .session import (
    StreamSessionController,
    StreamSession,
    StreamState,
    StreamQuality,
    quality_for_latency,
)
from .transports import Transport, LinkInfo, WifiTransport, UsbTransport, default_transports

__all__ = [
    "StreamSessionController",
    "StreamSession",
    "StreamState",
    "StreamQuality",
    "quality_for_latency",
    "Transport",
    "LinkInfo",
    "WifiTransport",
    "UsbTransport",
    "default_transports",
]
