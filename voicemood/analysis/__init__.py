"""Mood classification, feature extraction and session coordination"""

from voicemood.analysis.classifier import MoodClassifier, classify_mood, score_moods
from voicemood.analysis.session import EmotionSession, ExtractorUnavailableError, analyze_samples

__all__ = [
    'MoodClassifier',
    'classify_mood',
    'score_moods',
    'EmotionSession',
    'ExtractorUnavailableError',
    'analyze_samples',
]
