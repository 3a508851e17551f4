"""
Vision: change detection and text extraction.
"""
from .frames import Frame, SimulatedScreen, to_grayscale
from .change_detector import ChangeDetector, DEFAULT_SIMILARITY_THRESHOLD
from .extractors import (
    TextExtractor,
    FastTextExtractor,
    AccurateTextExtractor,
    create_text_extractor,
    SAMPLE_QUESTIONS,
)

__all__ = [
    "Frame",
    "SimulatedScreen",
    "to_grayscale",
    "ChangeDetector",
    "DEFAULT_SIMILARITY_THRESHOLD",
    "TextExtractor",
    "FastTextExtractor",
    "AccurateTextExtractor",
    "create_text_extractor",
    "SAMPLE_QUESTIONS",
]
