"""
Frame helpers.

A frame is either a decoded image array (grayscale or BGR, as OpenCV
produces them) or encoded image bytes straight from the camera.
"""
import asyncio
import random
import logging
from typing import Optional, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)

Frame = Union[np.ndarray, bytes]


def to_grayscale(frame: Optional[Frame]) -> Optional[np.ndarray]:
    """
    Decode a frame into a 2-D uint8 grayscale array.

    Returns:
        Grayscale array, or None if the frame is missing or unreadable
    """
    if frame is None:
        return None

    if isinstance(frame, (bytes, bytearray)):
        if not frame:
            return None
        buffer = np.frombuffer(bytes(frame), np.uint8)
        return cv2.imdecode(buffer, cv2.IMREAD_GRAYSCALE)

    image = np.asarray(frame)
    if image.size == 0:
        return None
    if image.dtype != np.uint8:
        image = np.clip(image, 0, 255).astype(np.uint8)

    if image.ndim == 2:
        return image
    if image.ndim == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    if image.ndim == 3 and image.shape[2] == 1:
        return image[:, :, 0]
    return None


class SimulatedScreen:
    """
    Stand-in camera pointed at a PC screen.

    Every `change_every` captures the "screen" switches to new content;
    in between it returns the same image with slight sensor noise.
    """

    def __init__(
        self,
        width: int = 320,
        height: int = 240,
        change_every: int = 3,
        capture_delay: float = 0.0,
        rng: Optional[random.Random] = None,
    ):
        self.width = width
        self.height = height
        self.change_every = max(1, change_every)
        self.capture_delay = capture_delay
        self.rng = rng or random.Random()
        self._captures = 0
        self._screen = self._new_screen()

    def _new_screen(self) -> np.ndarray:
        seed = self.rng.randrange(2 ** 32)
        blocks = np.random.default_rng(seed).integers(0, 256, size=(12, 16), dtype=np.uint8)
        screen = cv2.resize(blocks, (self.width, self.height), interpolation=cv2.INTER_NEAREST)
        return cv2.cvtColor(screen, cv2.COLOR_GRAY2BGR)

    async def capture(self) -> np.ndarray:
        if self.capture_delay:
            await asyncio.sleep(self.capture_delay)

        self._captures += 1
        if self._captures % self.change_every == 0:
            self._screen = self._new_screen()
            logger.debug("Simulated screen content changed")

        noise = np.random.default_rng(self._captures).integers(-3, 4, size=self._screen.shape)
        return np.clip(self._screen.astype(np.int16) + noise, 0, 255).astype(np.uint8)
