"""
Text extraction providers.

Two interchangeable variants: a fast, approximate reader and a slower,
more accurate one. Recognition is simulated; the text comes from an
injectable source so callers and tests control what is "on screen".
"""
import asyncio
import random
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

import numpy as np

from ..core.config import ExtractionBackend, ProviderConfig
from ..core.models import DetectionResult, Rect
from .frames import Frame, to_grayscale

logger = logging.getLogger(__name__)

SAMPLE_QUESTIONS = [
    "What is the capital of France?",
    "How do you calculate compound interest?",
    "What is the difference between React and Vue?",
    "Explain the concept of machine learning",
    "What are the benefits of renewable energy?",
]

# Below this grayscale standard deviation the frame is treated as blank
BLANK_FRAME_STDDEV = 2.0

TextSource = Callable[[Frame], str]


def is_blank(frame: Optional[Frame]) -> bool:
    gray = to_grayscale(frame)
    return gray is None or float(np.std(gray)) < BLANK_FRAME_STDDEV


class TextExtractor(ABC):
    """Turns a captured frame into recognized text plus confidence."""

    name = "base"

    # Default simulated latency (seconds) and confidence range
    LATENCY = 0.0
    CONFIDENCE_RANGE = (0.0, 1.0)

    def __init__(
        self,
        text_source: Optional[TextSource] = None,
        latency: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ):
        self.rng = rng or random.Random()
        self.text_source = text_source or self._sample_question
        self.latency = self.LATENCY if latency is None else latency

    def _sample_question(self, frame: Frame) -> str:
        return self.rng.choice(SAMPLE_QUESTIONS)

    def _confidence(self) -> float:
        low, high = self.CONFIDENCE_RANGE
        return low + self.rng.random() * (high - low)

    async def extract(self, frame: Optional[Frame]) -> DetectionResult:
        """
        Recognize text in a frame.

        Blank or unreadable frames give an empty result with zero confidence.
        """
        if self.latency:
            await asyncio.sleep(self.latency)

        if is_blank(frame):
            logger.debug(f"{self.name}: no text in frame")
            return DetectionResult(text="", confidence=0.0)

        text = (self.text_source(frame) or "").strip()
        if not text:
            return DetectionResult(text="", confidence=0.0)

        return self._build_result(frame, text)

    @abstractmethod
    def _build_result(self, frame: Frame, text: str) -> DetectionResult:
        """Wrap recognized text with variant-specific confidence and boxes."""


class FastTextExtractor(TextExtractor):
    """Approximate on-device reader (~1s)."""

    name = "fast"
    LATENCY = 1.0
    CONFIDENCE_RANGE = (0.75, 0.95)

    def _build_result(self, frame: Frame, text: str) -> DetectionResult:
        gray = to_grayscale(frame)
        height, width = gray.shape[:2]
        # Single line box across the middle of the frame
        box = Rect(x=width // 8, y=height * 2 // 5, width=width * 3 // 4, height=max(1, height // 5))
        return DetectionResult(text=text, confidence=self._confidence(), bounding_boxes=[box])


class AccurateTextExtractor(TextExtractor):
    """Slower, more accurate reader (~1.5s)."""

    name = "accurate"
    LATENCY = 1.5
    CONFIDENCE_RANGE = (0.85, 1.0)

    def _build_result(self, frame: Frame, text: str) -> DetectionResult:
        return DetectionResult(text=text, confidence=self._confidence())


def create_text_extractor(
    config: ProviderConfig,
    text_source: Optional[TextSource] = None,
    rng: Optional[random.Random] = None,
) -> TextExtractor:
    """Pick the extraction variant once, at configuration time."""
    if config.extraction_backend == ExtractionBackend.ACCURATE:
        return AccurateTextExtractor(text_source=text_source, rng=rng)
    return FastTextExtractor(text_source=text_source, rng=rng)
