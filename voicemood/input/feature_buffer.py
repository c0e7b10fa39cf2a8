"""Feature Window Buffer for per-session frame accumulation"""

import logging
import threading
from typing import List, Tuple

from voicemood.models.features import FeatureFrame


logger = logging.getLogger(__name__)


class FeatureWindowBuffer:
    """Accumulates feature frames for one capture session in arrival order.

    The producer appends frames as the extractor emits them; the session
    snapshots either the most recent window (live estimates) or the whole
    history (final estimate). Snapshots are tuples, so the classifier can work
    on them while the producer keeps appending.

    Thread safety: one writer and any number of concurrent readers.
    """

    def __init__(self):
        self._frames: List[FeatureFrame] = []
        self._lock = threading.Lock()

    def append(self, frame: FeatureFrame) -> None:
        """Append one frame. Never blocks on readers for longer than a list copy."""
        with self._lock:
            self._frames.append(frame)

    def snapshot_recent(self, k: int) -> Tuple[FeatureFrame, ...]:
        """Return up to the last k frames, oldest first.

        Holding fewer than k frames is not an error: all of them are returned.
        """
        if k <= 0:
            return ()
        with self._lock:
            return tuple(self._frames[-k:])

    def snapshot_all(self) -> Tuple[FeatureFrame, ...]:
        """Return every frame appended since creation or the last reset"""
        with self._lock:
            return tuple(self._frames)

    def reset(self) -> None:
        """Drop all frames"""
        with self._lock:
            dropped = len(self._frames)
            self._frames = []
        logger.debug(f"Feature buffer reset, dropped {dropped} frames")

    def __len__(self) -> int:
        with self._lock:
            return len(self._frames)

    def __repr__(self) -> str:
        return f"FeatureWindowBuffer(frames={len(self)})"
