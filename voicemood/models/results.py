"""Data models for classification results"""

from dataclasses import dataclass
from typing import Dict
from voicemood.models.enums import Mood


MoodScores = Dict[Mood, float]


def initial_scores() -> MoodScores:
    """Fresh score table with the built-in bias towards Neutral"""
    scores = {mood: 0.0 for mood in Mood}
    scores[Mood.NEUTRAL] = 1.0
    return scores


@dataclass
class MoodEstimate:
    """Mood published by an emotion session

    Attributes:
        mood: Classified mood
        is_final: True for the end-of-capture result, False for a live estimate
        frame_count: Number of frames the classifier looked at
        timestamp: When this estimate was generated (seconds since epoch)
    """
    mood: Mood
    is_final: bool
    frame_count: int
    timestamp: float

    def __post_init__(self):
        """Validate estimate data"""
        assert isinstance(self.mood, Mood), "Mood must be a Mood member"
        assert self.frame_count >= 0, "Frame count must be non-negative"
        assert self.timestamp >= 0, "Timestamp must be non-negative"
