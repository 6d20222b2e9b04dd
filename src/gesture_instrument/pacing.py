from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class FrameSkipper:
    """
    Adaptive frame skipping for the capture loop.

    Drops to every 2nd frame when the measured FPS falls below ``fps_threshold``
    and returns to every frame once it climbs above ``fps_threshold + recovery_margin``.
    """

    fps_threshold: int = 20
    recovery_margin: int = 5
    every_nth: int = 1
    frame_count: int = 0

    def should_process(self) -> bool:
        self.frame_count += 1
        return self.frame_count % self.every_nth == 0

    def observe(self, fps: int) -> None:
        if fps <= 0:
            return
        if fps < self.fps_threshold and self.every_nth == 1:
            self.every_nth = 2
            logger.warning("Performance: enabling frame skipping (processing every 2nd frame, %d fps)", fps)
        elif fps > self.fps_threshold + self.recovery_margin and self.every_nth > 1:
            self.every_nth = 1
            logger.info("Performance: disabling frame skipping (%d fps)", fps)
