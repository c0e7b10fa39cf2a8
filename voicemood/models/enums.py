"""Enumerations for mood labels"""

from enum import Enum


class Mood(Enum):
    """Closed set of mood labels produced by the classifier.

    Declaration order is significant: the classifier walks moods in this order
    when picking a winner, and an earlier mood keeps a tie.
    """
    HAPPY = "Happy"
    SAD = "Sad"
    ANXIOUS = "Anxious"
    EXCITED = "Excited"
    NEUTRAL = "Neutral"

    @property
    def emoji(self) -> str:
        """Display emoji shown next to the live label"""
        return _MOOD_EMOJI[self]

    def __str__(self) -> str:
        return self.value


_MOOD_EMOJI = {
    Mood.HAPPY: "😊",
    Mood.SAD: "😢",
    Mood.ANXIOUS: "😟",
    Mood.EXCITED: "🎉",
    Mood.NEUTRAL: "🤔",
}
