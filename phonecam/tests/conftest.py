"""
Shared fixtures for PhoneCam tests.

Provides:
- Stub answer provider with per-question delays and a call log
- Scanner factory wired to scripted extractor and detector
- Sample frames
"""
from typing import List

import numpy as np
import pytest

from phonecam.core.config import ScanConfig
from phonecam.scanner import ScanLoopController
from phonecam.tests.stubs import ScriptedExtractor, StubAnswerProvider, StubDetector


async def _capture():
    return np.full((48, 64, 3), 128, dtype=np.uint8)


@pytest.fixture
def answer_provider():
    return StubAnswerProvider()


@pytest.fixture
def detector():
    return StubDetector()


@pytest.fixture
def make_scanner(detector, answer_provider):
    """Factory for a scanner whose timer never fires on its own."""

    def factory(texts: List[str], capture=_capture, **overrides):
        return ScanLoopController(
            capture_frame=capture,
            detector=overrides.get("detector", detector),
            extractor=overrides.get("extractor", ScriptedExtractor(texts)),
            answer_provider=overrides.get("answer_provider", answer_provider),
            config=overrides.get("config", ScanConfig(scan_interval_seconds=3600)),
        )

    return factory


@pytest.fixture
def textured_frame() -> np.ndarray:
    """Grayscale frame with a left-to-right gradient and a dark box."""
    frame = np.tile(np.linspace(0, 255, 160, dtype=np.uint8), (120, 1))
    frame[30:60, 40:100] = 10
    return frame


@pytest.fixture
def other_frame() -> np.ndarray:
    """Content unrelated to textured_frame."""
    frame = np.tile(np.linspace(255, 0, 120, dtype=np.uint8).reshape(120, 1), (1, 160))
    frame[70:110, 10:60] = 240
    return frame
