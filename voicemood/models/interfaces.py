"""Base interfaces for feature extraction"""

from abc import ABC, abstractmethod
import numpy as np
from voicemood.models.features import FeatureFrame


class FeatureExtractionError(Exception):
    """Exception raised when features cannot be extracted from an audio frame"""
    pass


class FeatureExtractor(ABC):
    """Capability that turns one frame of raw audio into a FeatureFrame.

    Implementations are handed to an EmotionSession when capture starts, so
    the session never looks up an extraction library on its own.
    """

    sample_rate: int
    frame_size: int

    @abstractmethod
    def extract(self, samples: np.ndarray) -> FeatureFrame:
        """Extract features from one frame of mono PCM samples

        Args:
            samples: Float samples in [-1, 1], nominally frame_size long

        Returns:
            Extracted features

        Raises:
            FeatureExtractionError: If extraction fails for this frame
        """
        pass
