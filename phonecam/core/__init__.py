"""
PhoneCam Core Components.
- Config/SettingsStore: configuration and change notification
- Errors: ConfigurationError, UpstreamError, StreamConnectionError, AlreadyActiveError
- Models: Question, DetectionResult, ChangeResult, Answer
- AnswerHistory: in-memory answer records
"""
from .config import (
    AppSettings,
    ProviderConfig,
    WebcamConfig,
    ScanConfig,
    AnswerBackend,
    ExtractionBackend,
    TransportKind,
    Resolution,
    CameraFacing,
    load_settings,
)
from .errors import (
    PhoneCamError,
    ConfigurationError,
    UpstreamError,
    StreamConnectionError,
    AlreadyActiveError,
)
from .models import Rect, Question, DetectionResult, ChangeResult, Answer
from .history import AnswerHistory, HistoryItem, HistoryMode
from .settings import SettingsStore

__all__ = [
    # Configuration
    "AppSettings",
    "ProviderConfig",
    "WebcamConfig",
    "ScanConfig",
    "AnswerBackend",
    "ExtractionBackend",
    "TransportKind",
    "Resolution",
    "CameraFacing",
    "load_settings",
    "SettingsStore",
    # Errors
    "PhoneCamError",
    "ConfigurationError",
    "UpstreamError",
    "StreamConnectionError",
    "AlreadyActiveError",
    # Records
    "Rect",
    "Question",
    "DetectionResult",
    "ChangeResult",
    "Answer",
    # History
    "AnswerHistory",
    "HistoryItem",
    "HistoryMode",
]
