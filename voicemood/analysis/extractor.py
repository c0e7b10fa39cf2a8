"""Librosa-backed feature extraction

Default FeatureExtractor implementation. Turns one frame of raw mono audio
into the six features the mood classifier consumes. The signal-processing
itself is delegated to librosa.
"""

import logging
from typing import Optional

import numpy as np
import librosa

from voicemood.config.config_loader import config
from voicemood.models.features import FeatureFrame
from voicemood.models.interfaces import FeatureExtractor, FeatureExtractionError


logger = logging.getLogger(__name__)


ROLLOFF_PERCENT = 0.99


class LibrosaFeatureExtractor(FeatureExtractor):
    """Extracts per-frame voice features with librosa.

    Each call analyses exactly one frame of frame_size samples: a single STFT
    column with no centring, so the features describe that frame alone.
    Shorter input is zero-padded; longer input is truncated.

    Attributes:
        sample_rate: Sample rate of incoming audio in Hz
        frame_size: Samples per analysis frame
        n_mfcc: Number of cepstral coefficients
        n_mels: Mel bands used for the MFCC computation
    """

    def __init__(
        self,
        sample_rate: Optional[int] = None,
        frame_size: Optional[int] = None,
        n_mfcc: Optional[int] = None,
        n_mels: Optional[int] = None,
    ):
        self.sample_rate = sample_rate or config.get('extraction.sample_rate', 16000)
        self.frame_size = frame_size or config.get('extraction.frame_size', 512)
        self.n_mfcc = n_mfcc or config.get('extraction.n_mfcc', 13)
        self.n_mels = n_mels or config.get('extraction.n_mels', 40)
        self._frequencies = librosa.fft_frequencies(sr=self.sample_rate, n_fft=self.frame_size)

        logger.info(
            f"LibrosaFeatureExtractor initialized: sr={self.sample_rate}, "
            f"frame_size={self.frame_size}, n_mfcc={self.n_mfcc}"
        )

    def _prepare(self, samples: np.ndarray) -> np.ndarray:
        y = np.asarray(samples, dtype=np.float32)
        if y.ndim > 1:
            # Downmix (channels, samples) to mono
            y = np.mean(y, axis=0)
        if len(y) < self.frame_size:
            y = np.pad(y, (0, self.frame_size - len(y)))
        return y[:self.frame_size]

    def _spectral_slope(self, magnitude: np.ndarray) -> float:
        """Least-squares slope of magnitude against frequency, scaled by total magnitude"""
        amp_sum = float(np.sum(magnitude))
        if amp_sum <= 0.0:
            return 0.0
        freqs = self._frequencies
        n = len(freqs)
        freq_sum = float(np.sum(freqs))
        pow_freq_sum = float(np.sum(freqs ** 2))
        amp_freq_sum = float(np.sum(freqs * magnitude))
        denominator = amp_sum * (n * pow_freq_sum - freq_sum ** 2)
        if denominator == 0.0:
            return 0.0
        return (n * amp_freq_sum - freq_sum * amp_sum) / denominator

    def extract(self, samples: np.ndarray) -> FeatureFrame:
        """Extract features from one frame of audio.

        Spectral shape is undefined for an all-zero frame, so a silent frame
        carries RMS and MFCC only.

        Args:
            samples: Mono (or channels-first) PCM samples in [-1, 1]

        Returns:
            FeatureFrame for this frame

        Raises:
            FeatureExtractionError: If librosa fails on the input
        """
        try:
            y = self._prepare(samples)
            sr = self.sample_rate
            n_fft = self.frame_size
            frame_args = dict(n_fft=n_fft, hop_length=n_fft, center=False)

            rms = float(librosa.feature.rms(
                y=y, frame_length=n_fft, hop_length=n_fft, center=False
            )[0, 0])

            mfcc = librosa.feature.mfcc(
                y=y, sr=sr, n_mfcc=self.n_mfcc, n_mels=self.n_mels, **frame_args
            )[:, 0]

            if rms == 0.0:
                return FeatureFrame(rms=0.0, mfcc=tuple(float(c) for c in mfcc))

            magnitude = np.abs(librosa.stft(y, **frame_args))
            centroid = librosa.feature.spectral_centroid(S=magnitude, sr=sr, n_fft=n_fft)
            flatness = librosa.feature.spectral_flatness(S=magnitude, n_fft=n_fft)
            rolloff = librosa.feature.spectral_rolloff(
                S=magnitude, sr=sr, n_fft=n_fft, roll_percent=ROLLOFF_PERCENT
            )

            return FeatureFrame(
                rms=rms,
                spectral_centroid=float(centroid[0, 0]),
                spectral_flatness=float(flatness[0, 0]),
                spectral_slope=self._spectral_slope(magnitude[:, 0]),
                spectral_rolloff=float(rolloff[0, 0]),
                mfcc=tuple(float(c) for c in mfcc),
            )
        except Exception as e:
            logger.error(f"Feature extraction failed: {e}")
            raise FeatureExtractionError(f"Failed to extract voice features: {e}")

    def __repr__(self) -> str:
        return (
            f"LibrosaFeatureExtractor(sample_rate={self.sample_rate}, "
            f"frame_size={self.frame_size}, n_mfcc={self.n_mfcc})"
        )
