"""
Core data records shared by the scanner and the providers.
"""
import time
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Rect:
    """Axis-aligned region in frame pixel coordinates."""
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class DetectionResult:
    """Text recognized in a frame."""
    text: str
    confidence: float  # 0.0-1.0, an estimate
    bounding_boxes: List[Rect] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class ChangeResult:
    """Outcome of comparing a frame against the previous one."""
    changed: bool
    confidence: float
    similarity: float = 0.0
    changed_regions: List[Rect] = field(default_factory=list)


@dataclass(frozen=True)
class Question:
    """Text believed to need an answer."""
    text: str
    captured_at: float = field(default_factory=time.time)
    confidence: float = 0.0

    @classmethod
    def from_detection(cls, detection: DetectionResult) -> "Question":
        return cls(text=detection.text.strip(), confidence=detection.confidence)


@dataclass(frozen=True)
class Answer:
    """Answer produced for one accepted Question."""
    question: Question
    answer_text: str
    answered_at: float = field(default_factory=time.time)
    provider: str = ""
    latency_ms: float = 0.0
