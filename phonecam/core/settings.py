"""
Settings store.

Owns the one AppSettings instance for the process. Components receive the
store explicitly and subscribe to changes; nothing here is persisted.
"""
import logging
from dataclasses import replace
from typing import Any, Callable, Optional

from .config import (
    AppSettings,
    AnswerBackend,
    ExtractionBackend,
    ScanConfig,
    coerce_enum,
)
from .errors import ConfigurationError
from .observers import Observable

logger = logging.getLogger(__name__)


class SettingsStore:
    """Mutable holder for AppSettings with change notification."""

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or AppSettings()
        self._changes: Observable = Observable()

    @property
    def settings(self) -> AppSettings:
        return self._settings

    def subscribe(self, callback: Callable[[AppSettings, AppSettings], None]) -> Callable[[], None]:
        """Callback receives (old, new) after every change."""
        return self._changes.subscribe(lambda pair: callback(*pair))

    def _apply(self, new: AppSettings):
        old = self._settings
        if new == old:
            return
        self._settings = new
        self._changes.notify((old, new))

    def set_api_key(self, api_key: str):
        """
        Store the answer backend credential.

        Raises:
            ConfigurationError: blank key
        """
        if not api_key or not api_key.strip():
            raise ConfigurationError("Please enter a valid API key")
        self._apply(replace(self._settings, provider=replace(self._settings.provider, credential=api_key.strip())))
        logger.info("API key updated")

    def set_answer_backend(self, backend: Any):
        backend = coerce_enum(AnswerBackend, backend, "answer_backend")
        self._apply(replace(self._settings, provider=replace(self._settings.provider, answer_backend=backend)))

    def set_extraction_backend(self, backend: Any):
        backend = coerce_enum(ExtractionBackend, backend, "extraction_backend")
        self._apply(replace(self._settings, provider=replace(self._settings.provider, extraction_backend=backend)))

    def update_webcam(self, **changes: Any):
        self._apply(replace(self._settings, webcam=self._settings.webcam.merged(changes)))

    def update_scan(self, scan: ScanConfig):
        self._apply(replace(self._settings, scan=scan))

    def update(self, **changes: Any):
        """Set top-level flags: auto_scan, battery_saver, dark_mode."""
        allowed = {"auto_scan", "battery_saver", "dark_mode"}
        unknown = set(changes) - allowed
        if unknown:
            raise ConfigurationError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
        self._apply(replace(self._settings, **{k: bool(v) for k, v in changes.items()}))

    def reset(self):
        """Restore every setting, including the API key, to its default."""
        self._apply(AppSettings())
        logger.info("Settings reset to defaults")
