"""
PhoneCam application wiring.

Builds every service from the one SettingsStore and keeps them in sync
with it. Providers are selected here, once per configuration change,
never per call.
"""
import logging
from typing import Optional

from .api_clients import create_answer_provider
from .core.config import AppSettings
from .core.history import AnswerHistory, HistoryMode
from .core.models import Answer
from .core.settings import SettingsStore
from .scanner import ScanLoopController
from .scanner.controller import FrameSource
from .vision import ChangeDetector, create_text_extractor
from .webcam import StreamSessionController
from .webcam.transports import default_transports

logger = logging.getLogger(__name__)


class PhoneCamApp:
    """
    Composition root.

    Owns:
    - ScanLoopController: screen question scanner
    - StreamSessionController: webcam stream to a paired computer
    - AnswerHistory: in-memory record of answers
    """

    def __init__(
        self,
        store: SettingsStore,
        capture_frame: FrameSource,
        scanner: Optional[ScanLoopController] = None,
        stream: Optional[StreamSessionController] = None,
        history: Optional[AnswerHistory] = None,
    ):
        self.store = store
        settings = store.settings

        self.history = history or AnswerHistory()
        self.scanner = scanner or ScanLoopController(
            capture_frame=capture_frame,
            detector=ChangeDetector(threshold=settings.scan.similarity_threshold),
            extractor=create_text_extractor(settings.provider),
            answer_provider=create_answer_provider(settings.provider),
            config=settings.scan,
        )
        self.stream = stream or StreamSessionController(
            config=settings.webcam,
            transports=default_transports(),
        )

        self.scanner.set_battery_saver(settings.battery_saver)
        self._unsubscribe = [
            store.subscribe(self._on_settings_changed),
            self.scanner.on_answer(self._record_answer),
        ]

    def _record_answer(self, answer: Answer):
        self.history.record(answer, mode=HistoryMode.SCANNER)

    def _on_settings_changed(self, old: AppSettings, new: AppSettings):
        if new.provider != old.provider:
            extractor = None
            if new.provider.extraction_backend != old.provider.extraction_backend:
                extractor = create_text_extractor(new.provider)
            self.scanner.use_providers(
                extractor=extractor,
                answer_provider=create_answer_provider(new.provider),
            )
            logger.info(f"Providers updated: {new.provider!r}")

        if new.scan != old.scan:
            self.scanner.update_config(new.scan)

        if new.battery_saver != old.battery_saver:
            self.scanner.set_battery_saver(new.battery_saver)

        if new.webcam != old.webcam:
            self.stream.reconfigure(
                resolution=new.webcam.resolution,
                frame_rate=new.webcam.frame_rate,
                transport=new.webcam.transport,
                facing=new.webcam.facing,
            )

    async def start(self):
        """Start background services the settings ask for."""
        if self.store.settings.auto_scan:
            await self.scanner.start()

    async def shutdown(self):
        await self.scanner.stop()
        await self.stream.stop()
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        logger.info("PhoneCam shut down")
