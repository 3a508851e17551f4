"""
Scan Loop Controller.

Periodically captures the screen the phone is pointed at, and when the
content changed, reads the question on it and asks the answer backend.

Pipeline per tick:
    capture -> ChangeDetector.detect -> TextExtractor.extract
            -> dedupe against current question -> AnswerProvider.answer (background)

Answers run on their own tasks so a slow backend never blocks ticks. A
generation token makes the latest issued question win: results for a
superseded question, or results arriving after stop(), are dropped.
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from ..api_clients.base import AnswerProvider
from ..core.config import ScanConfig
from ..core.models import Answer, Question
from ..core.observers import Observable
from ..core.scheduler import PeriodicTimer
from ..vision.change_detector import ChangeDetector
from ..vision.extractors import TextExtractor
from ..vision.frames import Frame

logger = logging.getLogger(__name__)

FrameSource = Callable[[], Awaitable[Optional[Frame]]]


class ScanState(Enum):
    IDLE = "idle"
    SCANNING = "scanning"


@dataclass(frozen=True)
class ScanSnapshot:
    """Read-only view of the scanner for the presentation layer."""
    state: ScanState
    question: Optional[Question] = None
    answer: Optional[Answer] = None
    processing: bool = False
    last_error: Optional[str] = None
    ticks: int = 0
    answers_requested: int = 0
    battery_saver: bool = False

    @property
    def is_scanning(self) -> bool:
        return self.state == ScanState.SCANNING


class ScanLoopController:
    """
    Ties change detection, text extraction and answering together on a
    fixed cadence.

    All mutations happen on the event loop thread, so no locks are needed.
    """

    def __init__(
        self,
        capture_frame: FrameSource,
        detector: ChangeDetector,
        extractor: TextExtractor,
        answer_provider: AnswerProvider,
        config: Optional[ScanConfig] = None,
    ):
        self.capture_frame = capture_frame
        self.detector = detector
        self.extractor = extractor
        self.answer_provider = answer_provider
        self.config = config or ScanConfig()

        self._state = ScanState.IDLE
        self._generation = 0
        self._question: Optional[Question] = None
        self._answer: Optional[Answer] = None
        self._last_error: Optional[str] = None
        self._processing = False
        self._answer_task: Optional[asyncio.Task] = None
        self._ticks = 0
        self._answers_requested = 0
        self._battery_saver = False
        self._tick_running = False

        self._timer = PeriodicTimer(self.scan_once, self.current_interval, name="scan-loop")
        self._state_changes: Observable = Observable()
        self._answers: Observable = Observable()
        self._errors: Observable = Observable()

    # Lifecycle

    @property
    def state(self) -> ScanState:
        return self._state

    def current_interval(self) -> float:
        if self._battery_saver:
            return self.config.battery_saver_interval
        return self.config.scan_interval_seconds

    async def start(self):
        """Begin periodic scanning."""
        if self._state == ScanState.SCANNING:
            logger.info("Scanner already running")
            return

        self._generation += 1
        self.detector.reset()
        self._state = ScanState.SCANNING
        self._timer.start()
        logger.info(f"Scanner started (every {self.current_interval():.1f}s)")
        self._publish()

    async def stop(self):
        """
        Stop scanning and forget the current question and answer.

        State is cleared before the first await, so nothing in flight can
        mutate it once this returns.
        """
        if self._state == ScanState.IDLE:
            return

        self._state = ScanState.IDLE
        self._generation += 1
        task, self._answer_task = self._answer_task, None
        if task is not None and not task.done():
            task.cancel()
        self._question = None
        self._answer = None
        self._last_error = None
        self._processing = False
        self._publish()

        await self._timer.stop()
        logger.info("Scanner stopped")

    def set_battery_saver(self, enabled: bool):
        """Switch to the slower cadence; applies from the next tick."""
        if self._battery_saver == enabled:
            return
        self._battery_saver = enabled
        logger.info(f"Battery saver: {enabled}, interval: {self.current_interval():.1f}s")
        self._publish()

    def update_config(self, config: ScanConfig):
        """Apply new cadence and thresholds; the interval applies from the next wait."""
        self.config = config
        self.detector.threshold = config.similarity_threshold
        logger.info(f"Scan config updated, interval: {self.current_interval():.1f}s")
        self._publish()

    def use_providers(
        self,
        extractor: Optional[TextExtractor] = None,
        answer_provider: Optional[AnswerProvider] = None,
    ):
        """Swap providers for subsequent ticks; an in-flight answer keeps its provider."""
        if extractor is not None:
            self.extractor = extractor
        if answer_provider is not None:
            self.answer_provider = answer_provider

    # Observation

    def get_state(self) -> ScanSnapshot:
        return ScanSnapshot(
            state=self._state,
            question=self._question,
            answer=self._answer,
            processing=self._processing,
            last_error=self._last_error,
            ticks=self._ticks,
            answers_requested=self._answers_requested,
            battery_saver=self._battery_saver,
        )

    def subscribe(self, callback: Callable[[ScanSnapshot], None]) -> Callable[[], None]:
        """Callback receives a snapshot after every state change."""
        return self._state_changes.subscribe(callback)

    def on_answer(self, callback: Callable[[Answer], None]) -> Callable[[], None]:
        """Callback receives every accepted Answer."""
        return self._answers.subscribe(callback)

    def on_error(self, callback: Callable[[Exception], None]) -> Callable[[], None]:
        """Callback receives recoverable answer failures."""
        return self._errors.subscribe(callback)

    def _publish(self):
        self._state_changes.notify(self.get_state())

    # Pipeline

    def _is_current(self, generation: int) -> bool:
        return self._state == ScanState.SCANNING and generation == self._generation

    async def scan_once(self):
        """Run one tick of the pipeline; a call overlapping a running tick is a no-op."""
        if self._state != ScanState.SCANNING:
            return
        if self._tick_running:
            logger.debug("Tick already running, skipping")
            return

        self._tick_running = True
        try:
            await self._tick()
        finally:
            self._tick_running = False

    async def _tick(self):
        generation = self._generation
        self._ticks += 1

        try:
            frame = await self.capture_frame()
        except Exception as e:
            logger.warning(f"Frame capture failed, skipping tick: {e}")
            return
        if not self._is_current(generation):
            return

        change = self.detector.detect(frame)
        if not change.changed:
            logger.debug("Screen unchanged")
            return

        try:
            detection = await self.extractor.extract(frame)
        except Exception as e:
            logger.warning(f"Text extraction failed, skipping tick: {e}")
            return
        if not self._is_current(generation):
            return

        if detection.is_empty or detection.confidence < self.config.min_text_confidence:
            logger.debug(f"No usable text (confidence {detection.confidence:.2f})")
            return

        text = detection.text.strip()
        if self._question is not None and self._question.text == text:
            logger.debug("Same question as before, skipping")
            return

        self._ask(Question.from_detection(detection))

    def _ask(self, question: Question):
        self._generation += 1
        generation = self._generation

        previous = self._answer_task
        if previous is not None and not previous.done():
            previous.cancel()
            logger.debug("Superseded in-flight answer")

        self._question = question
        self._last_error = None
        self._processing = True
        self._answers_requested += 1
        self._answer_task = asyncio.create_task(
            self._resolve_answer(question, generation, self.answer_provider)
        )
        logger.info(f"New question: {question.text[:60]}")
        self._publish()

    async def _resolve_answer(self, question: Question, generation: int, provider: AnswerProvider):
        try:
            answer = await provider.answer(question)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not self._is_current(generation):
                return
            logger.error(f"Answer failed ({type(e).__name__}): {e}")
            self._last_error = str(e)
            self._processing = False
            self._answer_task = None
            self._publish()
            self._errors.notify(e)
            return

        if not self._is_current(generation):
            logger.debug(f"Discarding stale answer for: {question.text[:60]}")
            return

        self._answer = answer
        self._processing = False
        self._answer_task = None
        self._publish()
        self._answers.notify(answer)
