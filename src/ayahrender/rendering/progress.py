"""Render progress monitoring."""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class RenderProgressMonitor:
    """Tracks frames captured out of the composition's total."""

    def __init__(
        self,
        total_frames: int,
        callback: Callable[[float], None] | None = None,
        log_every: float = 0.1,
        verbose: bool = True,
    ):
        self.total_frames = total_frames
        self.callback = callback
        self.log_every = log_every
        self.verbose = verbose
        self.frames_done = 0
        self._last_logged = -1.0

    def advance(self, frames: int = 1) -> float:
        self.frames_done = min(self.total_frames, self.frames_done + frames)
        progress = self.progress
        if self.callback:
            self.callback(progress)
        if not self.verbose:
            return progress
        if progress >= 1.0 or progress - self._last_logged >= self.log_every:
            self._last_logged = progress
            logger.info(
                "Rendered %d/%d frames (%.0f%%)",
                self.frames_done,
                self.total_frames,
                progress * 100,
            )
        return progress

    @property
    def progress(self) -> float:
        """Current progress as fraction [0, 1]."""
        if self.total_frames <= 0:
            return 0.0
        return min(1.0, self.frames_done / self.total_frames)
