"""VoiceMood: mood classification from streamed voice features"""

__version__ = "0.1.0"
