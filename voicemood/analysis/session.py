"""Emotion session: live and final mood estimates for one capture

An EmotionSession sits between the audio-capture side (which produces feature
frames, directly or via an injected extractor) and whatever displays or stores
the mood. It decides when to classify, not how:

- every `cadence` frames, once at least `min_frames` are held, the most recent
  `window_size` frames are classified into a live estimate;
- when capture ends, the whole history is classified once into the final
  estimate, which supersedes any live one.
"""

import logging
import time
from typing import Callable, Optional

import numpy as np

from voicemood.analysis.classifier import MoodClassifier
from voicemood.config.config_loader import config
from voicemood.input.feature_buffer import FeatureWindowBuffer
from voicemood.models.enums import Mood
from voicemood.models.features import FeatureFrame
from voicemood.models.interfaces import FeatureExtractor, FeatureExtractionError
from voicemood.models.results import MoodEstimate


logger = logging.getLogger(__name__)


MoodCallback = Callable[[MoodEstimate], None]


class ExtractorUnavailableError(Exception):
    """Raised when raw samples reach a session that has no feature extractor"""
    pass


class EmotionSession:
    """Coordinates live and final mood classification for a capture session.

    Attributes:
        extractor: Injected feature extractor used by process_samples (optional)
        classifier: Mood classifier applied to buffer snapshots
        buffer: Frames accumulated since the session started
        window_size: Frames per live snapshot
        cadence: Live estimate every this many appended frames
        min_frames: Frames required before a live estimate is attempted
    """

    def __init__(
        self,
        extractor: Optional[FeatureExtractor] = None,
        classifier: Optional[MoodClassifier] = None,
        on_live_mood: Optional[MoodCallback] = None,
        on_final_mood: Optional[MoodCallback] = None,
    ):
        self.extractor = extractor
        self.classifier = classifier or MoodClassifier()
        self.on_live_mood = on_live_mood
        self.on_final_mood = on_final_mood

        self.window_size = config.get('streaming.window_size', 60)
        self.cadence = config.get('streaming.cadence', 30)
        self.min_frames = self.classifier.min_frames

        self.buffer = FeatureWindowBuffer()
        self.frame_count: int = 0
        self.live_estimate: Optional[MoodEstimate] = None
        self.final_estimate: Optional[MoodEstimate] = None
        self._active: bool = False

    def start(self) -> None:
        """Begin a new capture session, discarding all previous state"""
        if self._active:
            logger.warning("Emotion session already active, ignoring start()")
            return

        self.buffer.reset()
        self.frame_count = 0
        self.live_estimate = None
        self.final_estimate = None
        self._active = True
        logger.info("Emotion session started")

    def is_active(self) -> bool:
        return self._active

    def add_frame(self, frame: FeatureFrame) -> Optional[MoodEstimate]:
        """Append one feature frame and publish a live estimate when due.

        Args:
            frame: Features of the next audio frame

        Returns:
            The live estimate if this frame triggered one, otherwise None
        """
        if not self._active:
            logger.debug("Frame received while session inactive, ignoring")
            return None

        self.buffer.append(frame)
        self.frame_count += 1

        if self.frame_count % self.cadence != 0 or len(self.buffer) < self.min_frames:
            return None

        window = self.buffer.snapshot_recent(self.window_size)
        estimate = MoodEstimate(
            mood=self.classifier.classify(window),
            is_final=False,
            frame_count=len(window),
            timestamp=time.time(),
        )
        self.live_estimate = estimate
        logger.debug(f"Live mood after {self.frame_count} frames: {estimate.mood}")

        if self.on_live_mood is not None:
            self.on_live_mood(estimate)
        return estimate

    def process_samples(self, samples: np.ndarray) -> Optional[MoodEstimate]:
        """Extract features from one frame of raw audio and add them.

        Frames the extractor cannot handle are skipped.

        Raises:
            ExtractorUnavailableError: If the session was built without an extractor
        """
        if self.extractor is None:
            raise ExtractorUnavailableError("No feature extractor injected into this session")
        if not self._active:
            logger.debug("Samples received while session inactive, ignoring")
            return None

        try:
            frame = self.extractor.extract(samples)
        except FeatureExtractionError as e:
            logger.warning(f"Skipping audio frame: {e}")
            return None
        return self.add_frame(frame)

    def stop(self) -> MoodEstimate:
        """End capture and classify everything accumulated.

        The final estimate is always computed, even for very short captures
        (which classify as Neutral), and replaces the live estimate.
        """
        if not self._active:
            if self.final_estimate is not None:
                return self.final_estimate
            logger.warning("stop() called on a session that never started")
            return MoodEstimate(mood=Mood.NEUTRAL, is_final=True, frame_count=0, timestamp=time.time())

        self._active = False
        frames = self.buffer.snapshot_all()
        estimate = MoodEstimate(
            mood=self.classifier.classify(frames),
            is_final=True,
            frame_count=len(frames),
            timestamp=time.time(),
        )
        self.final_estimate = estimate
        self.live_estimate = None
        logger.info(f"Emotion session stopped after {len(frames)} frames, final mood: {estimate.mood}")

        if self.on_final_mood is not None:
            self.on_final_mood(estimate)
        return estimate

    def cancel(self) -> MoodEstimate:
        """Abort capture; the final classification still runs"""
        logger.info("Emotion session cancelled")
        return self.stop()

    def get_live_mood(self) -> Optional[Mood]:
        """Most recent live mood, or None before the first live estimate"""
        return self.live_estimate.mood if self.live_estimate else None

    def get_final_mood(self) -> Optional[Mood]:
        """Final mood of the last completed session, or None"""
        return self.final_estimate.mood if self.final_estimate else None

    def __repr__(self) -> str:
        return (
            f"EmotionSession(active={self._active}, frames={self.frame_count}, "
            f"window_size={self.window_size}, cadence={self.cadence})"
        )


def analyze_samples(
    samples: np.ndarray,
    extractor: FeatureExtractor,
    frame_size: Optional[int] = None,
    classifier: Optional[MoodClassifier] = None,
) -> MoodEstimate:
    """Classify a complete recording in one pass.

    The signal is cut into consecutive frame_size chunks (the last one
    zero-padded), each chunk goes through the extractor, and the whole series
    is classified once. Chunks the extractor rejects are skipped.

    Args:
        samples: Mono PCM samples of the whole recording
        extractor: Feature extractor to apply per chunk
        frame_size: Samples per chunk, defaults to the extractor's frame size
        classifier: Classifier to use (default MoodClassifier())

    Returns:
        Final MoodEstimate over all extracted frames
    """
    classifier = classifier or MoodClassifier()
    frame_size = frame_size or extractor.frame_size
    signal = np.asarray(samples, dtype=np.float32).ravel()

    buffer = FeatureWindowBuffer()
    skipped = 0
    for start in range(0, len(signal), frame_size):
        chunk = signal[start:start + frame_size]
        if len(chunk) < frame_size:
            chunk = np.pad(chunk, (0, frame_size - len(chunk)))
        try:
            buffer.append(extractor.extract(chunk))
        except FeatureExtractionError as e:
            skipped += 1
            logger.warning(f"Skipping chunk at sample {start}: {e}")

    frames = buffer.snapshot_all()
    mood = classifier.classify(frames)
    logger.info(f"Analyzed {len(frames)} frames ({skipped} skipped), mood: {mood}")

    return MoodEstimate(mood=mood, is_final=True, frame_count=len(frames), timestamp=time.time())
