"""Data models and interfaces"""

from voicemood.models.enums import Mood
from voicemood.models.features import (
    FeatureFrame,
    FeatureSeries,
    FeatureStats,
    Stat,
    MFCC_COEFFICIENTS,
    SCALAR_FEATURES,
)
from voicemood.models.results import MoodEstimate, MoodScores, initial_scores
from voicemood.models.interfaces import FeatureExtractor, FeatureExtractionError

__all__ = [
    # Enums
    "Mood",
    # Features
    "FeatureFrame",
    "FeatureSeries",
    "FeatureStats",
    "Stat",
    "MFCC_COEFFICIENTS",
    "SCALAR_FEATURES",
    # Results
    "MoodEstimate",
    "MoodScores",
    "initial_scores",
    # Interfaces
    "FeatureExtractor",
    "FeatureExtractionError",
]
