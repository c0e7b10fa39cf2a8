"""Mood Classification Module

Maps a series of per-frame voice features to one of five moods with a
heuristic scoring model. Each rule looks at the mean or spread of one feature
column and adds points to the moods it suggests; the best-scoring mood wins,
subject to two disambiguation overrides and a confidence floor.

The classifier is pure: it keeps no state between calls and never raises for
any series of frames. Too little data, missing fields and NaN values all
degrade towards Neutral.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from voicemood.config.config_loader import config
from voicemood.models.enums import Mood
from voicemood.models.features import (
    FeatureFrame,
    FeatureStats,
    MFCC_COEFFICIENTS,
    Stat,
    as_number,
)
from voicemood.models.results import MoodScores, initial_scores


logger = logging.getLogger(__name__)


MIN_FRAMES = 20

# Winner must reach this score unless an override picked it
CONFIDENCE_FLOOR = 2.5

# Anxious replaces an Excited winner when noisy and at least this close
ANXIOUS_OVERRIDE_RATIO = 0.75

# Energy (RMS mean)
RMS_HIGH = 0.09
RMS_MEDIUM = 0.05
RMS_LOW = 0.02
RMS_VARIABILITY_HIGH = 0.05

# Brightness (centroid, Hz)
CENTROID_HIGH = 2500.0
CENTROID_LOW = 1200.0
CENTROID_VARIABILITY_HIGH = 800.0
CENTROID_VARIABILITY_LOW = 300.0

# Timbre
SLOPE_BRIGHT = -0.05
SLOPE_DARK = -0.08
MFCC1_HIGH = 20.0
MFCC1_LOW = -10.0

# Tension
FLATNESS_HIGH = 0.2
ROLLOFF_HIGH = 4500.0


def compute_stat(values: Iterable[Any]) -> Stat:
    """Mean and population standard deviation over the numeric entries.

    Entries that are missing, non-numeric, NaN or infinite are skipped. An
    empty column yields Stat(0.0, 0.0, count=0).
    """
    valid = [v for v in (as_number(value) for value in values) if v is not None]
    if not valid:
        return Stat()
    array = np.asarray(valid, dtype=np.float64)
    return Stat(
        mean=float(np.mean(array)),
        std_dev=float(np.std(array)),
        count=len(valid),
    )


def _coerce_frame(frame: Any) -> Optional[FeatureFrame]:
    if isinstance(frame, FeatureFrame):
        return frame
    if isinstance(frame, Mapping):
        return FeatureFrame.from_dict(frame)
    return None


def _full_mfcc(frame: FeatureFrame) -> Optional[Sequence[Any]]:
    mfcc = frame.mfcc
    if isinstance(mfcc, (list, tuple, np.ndarray)) and len(mfcc) == MFCC_COEFFICIENTS:
        return mfcc
    return None


def compute_feature_stats(series: Iterable[Any]) -> FeatureStats:
    """Compute per-column statistics for a feature series.

    MFCC statistics are kept per coefficient index, each over its own series
    drawn only from frames that carry a complete 13-coefficient vector.
    """
    frames = [f for f in (_coerce_frame(frame) for frame in series) if f is not None]

    mfcc_columns: List[List[Any]] = [[] for _ in range(MFCC_COEFFICIENTS)]
    for frame in frames:
        mfcc = _full_mfcc(frame)
        if mfcc is None:
            continue
        for index, coefficient in enumerate(mfcc):
            mfcc_columns[index].append(coefficient)

    return FeatureStats(
        rms=compute_stat(f.rms for f in frames),
        spectral_centroid=compute_stat(f.spectral_centroid for f in frames),
        spectral_flatness=compute_stat(f.spectral_flatness for f in frames),
        spectral_slope=compute_stat(f.spectral_slope for f in frames),
        spectral_rolloff=compute_stat(f.spectral_rolloff for f in frames),
        mfcc=[compute_stat(column) for column in mfcc_columns],
    )


def score_stats(stats: FeatureStats) -> MoodScores:
    """Apply the scoring rules to precomputed statistics.

    Every rule is skipped when its column had no valid values, so an absent
    feature never scores as if it were zero.
    """
    scores = initial_scores()

    # Energy is an arousal proxy
    rms = stats.rms
    if not rms.is_empty:
        if rms.mean > RMS_HIGH:
            scores[Mood.EXCITED] += 2.0
            scores[Mood.ANXIOUS] += 1.0
        elif rms.mean > RMS_MEDIUM:
            scores[Mood.HAPPY] += 1.0
            scores[Mood.ANXIOUS] += 0.5
        elif rms.mean < RMS_LOW:
            scores[Mood.SAD] += 1.5

    centroid = stats.spectral_centroid
    if not centroid.is_empty:
        if centroid.mean > CENTROID_HIGH:
            scores[Mood.EXCITED] += 1.5
            scores[Mood.HAPPY] += 0.5
        if centroid.mean < CENTROID_LOW:
            scores[Mood.SAD] += 1.0

        if centroid.std_dev > CENTROID_VARIABILITY_HIGH:
            scores[Mood.EXCITED] += 1.0
            scores[Mood.HAPPY] += 1.0
        if centroid.std_dev < CENTROID_VARIABILITY_LOW:
            scores[Mood.SAD] += 1.5
            scores[Mood.NEUTRAL] += 0.5

    slope = stats.spectral_slope
    if not slope.is_empty:
        if slope.mean > SLOPE_BRIGHT:
            scores[Mood.HAPPY] += 1.0
            scores[Mood.EXCITED] += 0.5
        if slope.mean < SLOPE_DARK:
            scores[Mood.SAD] += 1.0

    if len(stats.mfcc) > 1 and not stats.mfcc[1].is_empty:
        mfcc1 = stats.mfcc[1]
        if mfcc1.mean > MFCC1_HIGH:
            scores[Mood.HAPPY] += 1.0
        if mfcc1.mean < MFCC1_LOW:
            scores[Mood.SAD] += 1.0

    flatness = stats.spectral_flatness
    if not flatness.is_empty and flatness.mean > FLATNESS_HIGH:
        scores[Mood.ANXIOUS] += 2.0

    rolloff = stats.spectral_rolloff
    if not rolloff.is_empty and rolloff.mean > ROLLOFF_HIGH:
        scores[Mood.ANXIOUS] += 1.0
        scores[Mood.EXCITED] += 1.0

    if not rms.is_empty and rms.std_dev > RMS_VARIABILITY_HIGH:
        scores[Mood.ANXIOUS] += 1.0

    return scores


def score_moods(series: Iterable[Any]) -> MoodScores:
    """Score every mood for a feature series"""
    return score_stats(compute_feature_stats(series))


def pick_winner(scores: MoodScores) -> Tuple[Mood, float]:
    """Return the mood with the strictly highest score and that score.

    Moods are visited in declaration order, so on a tie the earlier mood wins.
    """
    winner = Mood.NEUTRAL
    best = -1.0
    for mood in Mood:
        score = scores.get(mood, 0.0)
        if score > best:
            best = score
            winner = mood
    return winner, best


def resolve_mood(scores: MoodScores, stats: FeatureStats) -> Mood:
    """Turn a score table into the final mood.

    1. Pick the highest-scoring mood.
    2. Excited with noisy spectra and a close Anxious runner-up becomes
       Anxious; otherwise Happy at high energy becomes Excited.
    3. If no override fired and the winning score is below the confidence
       floor, fall back to Neutral.
    """
    winner, best = pick_winner(scores)

    flatness = stats.spectral_flatness
    rms = stats.rms
    if (
        winner is Mood.EXCITED
        and not flatness.is_empty
        and flatness.mean > FLATNESS_HIGH
        and scores.get(Mood.ANXIOUS, 0.0) > best * ANXIOUS_OVERRIDE_RATIO
    ):
        logger.debug("Excited overridden to Anxious (noisy spectrum)")
        return Mood.ANXIOUS
    if winner is Mood.HAPPY and not rms.is_empty and rms.mean > RMS_HIGH:
        logger.debug("Happy overridden to Excited (high energy)")
        return Mood.EXCITED

    if best < CONFIDENCE_FLOOR and winner is not Mood.NEUTRAL:
        logger.debug(f"{winner} scored {best:.2f}, below confidence floor; using Neutral")
        return Mood.NEUTRAL

    return winner


def classify_mood(series: Sequence[Any], min_frames: int = MIN_FRAMES) -> Mood:
    """Classify a feature series into a mood.

    Args:
        series: Feature frames in temporal order
        min_frames: Series shorter than this are classified Neutral outright

    Returns:
        The classified mood; never raises
    """
    if len(series) < min_frames:
        return Mood.NEUTRAL

    stats = compute_feature_stats(series)
    scores = score_stats(stats)
    mood = resolve_mood(scores, stats)

    if logger.isEnabledFor(logging.DEBUG):
        breakdown = ", ".join(f"{m.value}={s:.1f}" for m, s in scores.items())
        logger.debug(f"Classified {len(series)} frames as {mood} ({breakdown})")
    return mood


class MoodClassifier:
    """Stateless classifier wrapper carrying the minimum-frame threshold.

    Attributes:
        min_frames: Series shorter than this classify as Neutral
    """

    def __init__(self, min_frames: Optional[int] = None):
        if min_frames is None:
            min_frames = config.get('classifier.min_frames', MIN_FRAMES)
        self.min_frames = min_frames

    def classify(self, series: Sequence[Any]) -> Mood:
        """Classify a feature series; see classify_mood"""
        return classify_mood(series, min_frames=self.min_frames)

    def score(self, series: Sequence[Any]) -> MoodScores:
        """Raw mood scores for a series, ignoring the minimum-frame threshold"""
        return score_moods(series)

    def __repr__(self) -> str:
        return f"MoodClassifier(min_frames={self.min_frames})"
