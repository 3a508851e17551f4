"""
Screen change detection.

Compares each frame with the previous one using a difference hash plus
a coarse pixel comparison, and reports whether the screen content
changed enough to be worth re-reading.
"""
import logging
from typing import List, Optional

import cv2
import numpy as np

from ..core.models import ChangeResult, Rect
from .frames import Frame, to_grayscale

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.85
FIRST_FRAME_CONFIDENCE = 0.9

HASH_SIZE = 8
PIXEL_COMPARE_SIZE = 32
REGION_GRID = 4
REGION_DIFF_LEVEL = 25.0  # mean absolute grayscale difference per cell


def difference_hash(gray: np.ndarray) -> np.ndarray:
    """64-bit horizontal gradient hash as a boolean array."""
    resized = cv2.resize(gray, (HASH_SIZE + 1, HASH_SIZE), interpolation=cv2.INTER_AREA)
    return resized[:, 1:] > resized[:, :-1]


def frame_similarity(previous: np.ndarray, current: np.ndarray) -> float:
    """
    Similarity in [0, 1] between two grayscale frames.

    The hash catches layout changes; the pixel term catches changes the
    gradient hash is blind to (e.g. a uniform screen changing brightness).
    """
    hash_distance = np.count_nonzero(difference_hash(previous) != difference_hash(current))
    hash_similarity = 1.0 - hash_distance / float(HASH_SIZE * HASH_SIZE)

    size = (PIXEL_COMPARE_SIZE, PIXEL_COMPARE_SIZE)
    small_prev = cv2.resize(previous, size, interpolation=cv2.INTER_AREA).astype(np.float32)
    small_cur = cv2.resize(current, size, interpolation=cv2.INTER_AREA).astype(np.float32)
    pixel_similarity = 1.0 - float(np.mean(np.abs(small_prev - small_cur))) / 255.0

    return max(0.0, min(hash_similarity, pixel_similarity))


def changed_regions(previous: np.ndarray, current: np.ndarray) -> List[Rect]:
    """Grid cells of `current` whose content moved away from `previous`."""
    height, width = current.shape[:2]
    if previous.shape != current.shape:
        previous = cv2.resize(previous, (width, height), interpolation=cv2.INTER_AREA)

    diff = cv2.absdiff(previous, current)
    regions = []
    cell_h = max(1, height // REGION_GRID)
    cell_w = max(1, width // REGION_GRID)
    for row in range(REGION_GRID):
        for col in range(REGION_GRID):
            y, x = row * cell_h, col * cell_w
            h = height - y if row == REGION_GRID - 1 else cell_h
            w = width - x if col == REGION_GRID - 1 else cell_w
            cell = diff[y:y + h, x:x + w]
            if cell.size and float(cell.mean()) > REGION_DIFF_LEVEL:
                regions.append(Rect(x=x, y=y, width=w, height=h))
    return regions


class ChangeDetector:
    """
    Decides whether a new frame differs meaningfully from the last one.

    Keeps exactly one baseline frame, replaced on every readable frame. No
    history beyond that, so there is no flapping suppression.
    """

    def __init__(self, threshold: float = DEFAULT_SIMILARITY_THRESHOLD):
        self.threshold = threshold
        self._last_frame: Optional[np.ndarray] = None

    @property
    def has_baseline(self) -> bool:
        return self._last_frame is not None

    def reset(self):
        """Drop the baseline; the next frame reports a change."""
        self._last_frame = None

    def detect(self, frame: Optional[Frame]) -> ChangeResult:
        try:
            current = to_grayscale(frame)
            if current is None:
                logger.warning("Change detection skipped: frame unavailable")
                return ChangeResult(changed=False, confidence=0.0)

            previous, self._last_frame = self._last_frame, current.copy()
            if previous is None:
                return ChangeResult(changed=True, confidence=FIRST_FRAME_CONFIDENCE)

            similarity = frame_similarity(previous, current)
            changed = similarity < self.threshold
            logger.debug(f"Frame similarity {similarity:.3f} (threshold {self.threshold})")

            return ChangeResult(
                changed=changed,
                confidence=(1.0 - similarity) if changed else similarity,
                similarity=similarity,
                changed_regions=changed_regions(previous, current) if changed else [],
            )

        except (cv2.error, ValueError, TypeError) as e:
            logger.warning(f"Change detection failed: {e}")
            return ChangeResult(changed=False, confidence=0.0)
