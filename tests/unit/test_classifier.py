"""Unit tests for the mood classifier"""

import math

import pytest

from voicemood.analysis.classifier import (
    MoodClassifier,
    classify_mood,
    compute_feature_stats,
    compute_stat,
    pick_winner,
    resolve_mood,
    score_moods,
)
from voicemood.models import FeatureFrame, FeatureStats, Mood, Stat


def column(mean, spread=0.0, n=25):
    """n values averaging exactly `mean`, alternating +/- spread around it.

    For odd n the last value sits on the mean, so the population standard
    deviation is spread * sqrt((n - 1) / n).
    """
    values = [mean + spread, mean - spread] * (n // 2)
    if n % 2:
        values.append(mean)
    return values


def make_frames(n=25, rms=None, centroid=None, flatness=None, slope=None, rolloff=None, mfcc1=None):
    """Build n frames; each feature is None (absent), a mean, a (mean, spread) pair or a list."""
    def expand(shape):
        if shape is None:
            return [None] * n
        if isinstance(shape, list):
            return shape
        if isinstance(shape, tuple):
            return column(shape[0], shape[1], n)
        return column(shape, 0.0, n)

    columns = [expand(s) for s in (rms, centroid, flatness, slope, rolloff)]
    mfcc_column = expand(mfcc1)

    frames = []
    for i in range(n):
        mfcc = None
        if mfcc1 is not None:
            mfcc = (0.0, mfcc_column[i]) + (0.0,) * 11
        frames.append(FeatureFrame(
            rms=columns[0][i],
            spectral_centroid=columns[1][i],
            spectral_flatness=columns[2][i],
            spectral_slope=columns[3][i],
            spectral_rolloff=columns[4][i],
            mfcc=mfcc,
        ))
    return frames


# Mostly quiet with a few loud bursts: mean 0.03, population std 0.06
BURSTY_RMS = [0.0] * 20 + [0.15] * 5


def empty_stats(**overrides):
    stats = dict(
        rms=Stat(),
        spectral_centroid=Stat(),
        spectral_flatness=Stat(),
        spectral_slope=Stat(),
        spectral_rolloff=Stat(),
    )
    stats.update(overrides)
    return FeatureStats(**stats)


class TestComputeStat:
    """Tests for per-column statistics"""

    def test_population_standard_deviation(self):
        """Test that std_dev divides by N, not N-1"""
        stat = compute_stat([2, 4, 4, 4, 5, 5, 7, 9])

        assert stat.mean == pytest.approx(5.0)
        assert stat.std_dev == pytest.approx(2.0)
        assert stat.count == 8

    def test_invalid_entries_are_skipped(self):
        """Test that missing and non-numeric values do not count as zero"""
        stat = compute_stat([1.0, None, "loud", float("nan"), float("inf"), True, 3.0])

        assert stat.mean == pytest.approx(2.0)
        assert stat.count == 2

    def test_empty_column(self):
        """Test that an empty column yields zeroed statistics"""
        stat = compute_stat([None, "x"])

        assert stat == Stat(mean=0.0, std_dev=0.0, count=0)
        assert stat.is_empty

    def test_mfcc_uses_only_complete_vectors(self):
        """Test that frames with partial MFCC vectors are left out of MFCC stats"""
        frames = [
            FeatureFrame(mfcc=tuple(float(i) for i in range(13))),
            FeatureFrame(mfcc=(100.0,) * 12),
            FeatureFrame(mfcc=tuple(float(i) * 3 for i in range(13))),
        ]

        stats = compute_feature_stats(frames)

        assert len(stats.mfcc) == 13
        assert stats.mfcc[1].count == 2
        assert stats.mfcc[1].mean == pytest.approx(2.0)
        assert stats.mfcc[12].mean == pytest.approx(24.0)


class TestScoring:
    """Tests for score accumulation"""

    def test_neutral_bias(self):
        """Test that Neutral starts at 1.0 and every other mood at 0.0"""
        scores = score_moods([FeatureFrame() for _ in range(25)])

        assert scores == {
            Mood.HAPPY: 0.0,
            Mood.SAD: 0.0,
            Mood.ANXIOUS: 0.0,
            Mood.EXCITED: 0.0,
            Mood.NEUTRAL: 1.0,
        }

    def test_absent_columns_do_not_fire(self):
        """Test that a missing slope column does not satisfy 'mean > -0.05'"""
        scores = score_moods(make_frames(rms=0.03))

        assert scores[Mood.HAPPY] == 0.0
        assert scores[Mood.EXCITED] == 0.0
        assert scores[Mood.SAD] == 0.0

    def test_energy_rules_are_exclusive(self):
        """Test that only one RMS-mean branch applies"""
        high = score_moods(make_frames(rms=0.15))
        medium = score_moods(make_frames(rms=0.07))
        low = score_moods(make_frames(rms=0.01))

        assert (high[Mood.EXCITED], high[Mood.ANXIOUS], high[Mood.HAPPY]) == (2.0, 1.0, 0.0)
        assert (medium[Mood.HAPPY], medium[Mood.ANXIOUS]) == (1.0, 0.5)
        assert low[Mood.SAD] == 1.5

    def test_mfcc_coefficient_one(self):
        """Test the MFCC[1] rules"""
        bright = score_moods(make_frames(mfcc1=30.0))
        dark = score_moods(make_frames(mfcc1=-15.0))

        assert bright[Mood.HAPPY] == 1.0
        assert dark[Mood.SAD] == 1.0

    def test_anxious_example_scores(self):
        """Test flatness + rolloff + RMS variability for a tense voice"""
        scores = score_moods(make_frames(
            rms=BURSTY_RMS, flatness=0.35, rolloff=5000.0, centroid=1800.0
        ))

        assert scores[Mood.ANXIOUS] == pytest.approx(4.0)


class TestWinnerSelection:
    """Tests for winner selection, overrides and dampening"""

    def test_ties_keep_earlier_mood(self):
        """Test that a later mood with an equal score does not take the lead"""
        scores = {Mood.HAPPY: 3.0, Mood.SAD: 3.0, Mood.ANXIOUS: 0.0, Mood.EXCITED: 3.0, Mood.NEUTRAL: 1.0}

        assert pick_winner(scores) == (Mood.HAPPY, 3.0)

    def test_happy_at_high_energy_becomes_excited(self):
        """Test the Happy -> Excited override"""
        scores = {Mood.HAPPY: 3.0, Mood.SAD: 0.0, Mood.ANXIOUS: 0.0, Mood.EXCITED: 0.0, Mood.NEUTRAL: 1.0}
        stats = empty_stats(rms=Stat(mean=0.1, std_dev=0.0, count=25))

        assert resolve_mood(scores, stats) == Mood.EXCITED

    def test_override_bypasses_dampening(self):
        """Test that an override applies even when the max score is below the floor"""
        scores = {Mood.HAPPY: 2.0, Mood.SAD: 0.0, Mood.ANXIOUS: 0.0, Mood.EXCITED: 0.0, Mood.NEUTRAL: 1.0}
        stats = empty_stats(rms=Stat(mean=0.1, std_dev=0.0, count=25))

        assert resolve_mood(scores, stats) == Mood.EXCITED

    def test_low_confidence_becomes_neutral(self):
        """Test dampening below a winning score of 2.5"""
        # Sad scores 1.5 from low energy alone
        assert classify_mood(make_frames(rms=0.01)) == Mood.NEUTRAL

    def test_confidence_floor_is_inclusive(self):
        """Test that a winning score of exactly 2.5 survives dampening"""
        # Sad: 1.5 (low energy) + 1.0 (dark slope)
        assert classify_mood(make_frames(rms=0.01, slope=-0.1)) == Mood.SAD

    def test_noisy_excited_becomes_anxious(self):
        """Test the Excited -> Anxious override"""
        frames = make_frames(rms=(0.15, 0.082), centroid=(3000.0, 920.0), flatness=0.3)
        scores = score_moods(frames)

        # Excited 4.5 leads Anxious 4.0, which is above 0.75 x 4.5
        assert pick_winner(scores)[0] == Mood.EXCITED
        assert scores[Mood.ANXIOUS] > 0.75 * scores[Mood.EXCITED]
        assert classify_mood(frames) == Mood.ANXIOUS

    def test_excited_kept_when_anxious_far_behind(self):
        """Test that the Anxious override needs a close runner-up"""
        frames = make_frames(rms=(0.15, 0.01), centroid=(3000.0, 920.0), flatness=0.3)

        # Anxious 3.0 is not above 0.75 x 4.5
        assert classify_mood(frames) == Mood.EXCITED

    def test_excited_kept_when_spectrum_is_clean(self):
        """Test that the Anxious override needs a noisy spectrum"""
        frames = make_frames(
            n=24,
            rms=[0.09, 0.21] * 12,
            flatness=0.1,
            slope=-0.02,
            rolloff=5000.0,
        )
        scores = score_moods(frames)

        # Excited 3.5 leads a close Anxious 3.0, but flatness is low
        assert scores[Mood.EXCITED] == pytest.approx(3.5)
        assert scores[Mood.ANXIOUS] == pytest.approx(3.0)
        assert classify_mood(frames) == Mood.EXCITED

    def test_excited_kept_without_flatness(self):
        """Test that a missing flatness column never triggers the Anxious override"""
        scores = {Mood.HAPPY: 1.0, Mood.SAD: 0.0, Mood.ANXIOUS: 3.0, Mood.EXCITED: 3.5, Mood.NEUTRAL: 1.0}

        assert resolve_mood(scores, empty_stats()) == Mood.EXCITED

    def test_partial_score_table(self):
        """Test that moods missing from the score table count as zero"""
        stats = empty_stats(spectral_flatness=Stat(mean=0.3, std_dev=0.0, count=25))

        assert resolve_mood({Mood.EXCITED: 4.0}, stats) == Mood.EXCITED
        assert resolve_mood({Mood.EXCITED: 4.0, Mood.ANXIOUS: 3.5}, stats) == Mood.ANXIOUS
        assert resolve_mood({Mood.SAD: 3.0}, empty_stats()) == Mood.SAD


class TestClassifyMood:
    """Tests for the documented classification examples"""

    def test_too_few_frames(self):
        """Test that fewer than 20 frames always classify as Neutral"""
        frames = make_frames(n=19, rms=0.15, centroid=(3000.0, 950.0), slope=-0.02)

        assert classify_mood(frames) == Mood.NEUTRAL
        assert classify_mood([]) == Mood.NEUTRAL

    def test_twenty_frames_is_enough(self):
        """Test the minimum-frame boundary"""
        frames = make_frames(n=20, rms=0.01, centroid=(800.0, 100.0))

        assert classify_mood(frames) == Mood.SAD

    def test_excited_voice(self):
        """Test loud, bright, varied speech"""
        frames = make_frames(
            rms=(0.15, 0.01),
            centroid=(3000.0, 920.0),
            flatness=0.05,
            slope=-0.02,
            rolloff=3000.0,
        )

        assert classify_mood(frames) == Mood.EXCITED

    def test_sad_voice(self):
        """Test quiet, dark, monotone speech"""
        frames = make_frames(rms=0.01, centroid=(800.0, 100.0))

        assert classify_mood(frames) == Mood.SAD

    def test_anxious_voice(self):
        """Test noisy, tense speech with unsteady energy"""
        frames = make_frames(rms=BURSTY_RMS, flatness=0.35, rolloff=5000.0, centroid=1800.0)

        assert classify_mood(frames) == Mood.ANXIOUS

    def test_happy_voice(self):
        """Test moderately loud, lively speech"""
        frames = make_frames(rms=0.07, centroid=(2000.0, 920.0), slope=-0.02, mfcc1=25.0)

        assert classify_mood(frames) == Mood.HAPPY

    def test_silence(self):
        """Test that near-silent input is dampened to Neutral"""
        frames = [FeatureFrame(rms=0.0) for _ in range(25)]

        assert score_moods(frames)[Mood.SAD] == 1.5
        assert classify_mood(frames) == Mood.NEUTRAL

    def test_malformed_frames(self):
        """Test that garbage input degrades instead of raising"""
        frames = [
            FeatureFrame(rms="loud", spectral_centroid=float("nan"), mfcc="abc"),
            {"rms": 0.01, "spectralCentroid": 800.0, "mfcc": [1.0] * 13},
            None,
        ] * 10

        mood = classify_mood(frames)

        assert isinstance(mood, Mood)

    def test_accepts_extractor_dicts(self):
        """Test classification of camelCase feature mappings"""
        frames = [
            {"rms": value, "spectralCentroid": centroid}
            for value, centroid in zip(column(0.01), column(800.0, 100.0))
        ]

        assert classify_mood(frames) == Mood.SAD


class TestMoodClassifier:
    """Tests for the MoodClassifier wrapper"""

    def test_default_threshold(self):
        """Test that the configured minimum frame count is 20"""
        assert MoodClassifier().min_frames == 20

    def test_custom_threshold(self):
        """Test a lowered minimum frame count"""
        classifier = MoodClassifier(min_frames=5)
        frames = make_frames(n=5, rms=0.01, centroid=(800.0, 100.0))

        assert classifier.classify(frames) == Mood.SAD
        assert math.isclose(classifier.score(frames)[Mood.SAD], 4.0)
