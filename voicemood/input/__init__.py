"""Frame intake: per-session buffering and stream sources"""

from voicemood.input.feature_buffer import FeatureWindowBuffer

__all__ = ['FeatureWindowBuffer']
