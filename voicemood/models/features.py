"""Data models for extracted features and their statistics"""

import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
import numpy as np


MFCC_COEFFICIENTS = 13

SCALAR_FEATURES = (
    "rms",
    "spectral_centroid",
    "spectral_flatness",
    "spectral_slope",
    "spectral_rolloff",
)

# Key spellings emitted by browser-side and librosa-style extractors
_FEATURE_ALIASES = {
    "rms": "rms",
    "spectralCentroid": "spectral_centroid",
    "spectral_centroid": "spectral_centroid",
    "spectralFlatness": "spectral_flatness",
    "spectral_flatness": "spectral_flatness",
    "spectralSlope": "spectral_slope",
    "spectral_slope": "spectral_slope",
    "spectralRolloff": "spectral_rolloff",
    "spectral_rolloff": "spectral_rolloff",
}


def as_number(value: Any) -> Optional[float]:
    """Return value as a finite float, or None when it is missing or non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, numbers.Real):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    if not math.isfinite(value):
        return None
    return value


@dataclass(frozen=True)
class FeatureFrame:
    """Features extracted from one short analysis window (e.g. 512 samples)

    Attributes:
        rms: Root-mean-square energy (>= 0)
        spectral_centroid: Spectral centre of mass in Hz
        spectral_flatness: Noisiness, typically 0..1
        spectral_slope: Spectral tilt, typically negative
        spectral_rolloff: Rolloff frequency in Hz
        mfcc: 13 cepstral coefficients

    Any field may be None when the extractor could not provide it.
    """
    rms: Optional[float] = None
    spectral_centroid: Optional[float] = None
    spectral_flatness: Optional[float] = None
    spectral_slope: Optional[float] = None
    spectral_rolloff: Optional[float] = None
    mfcc: Optional[Tuple[float, ...]] = None

    def __post_init__(self):
        if isinstance(self.mfcc, (list, np.ndarray)):
            object.__setattr__(self, "mfcc", tuple(self.mfcc))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FeatureFrame":
        """Build a frame from a loosely-typed feature mapping.

        Unknown keys are ignored; non-numeric scalars become None. The MFCC
        vector is kept only when every coefficient is numeric.
        """
        values: Dict[str, Any] = {}
        for key, value in data.items():
            name = _FEATURE_ALIASES.get(key)
            if name is not None:
                values[name] = as_number(value)

        mfcc = data.get("mfcc")
        if isinstance(mfcc, (list, tuple, np.ndarray)):
            coefficients = [as_number(c) for c in mfcc]
            if all(c is not None for c in coefficients):
                values["mfcc"] = tuple(coefficients)

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Snake_case mapping of the present features"""
        data = {
            name: getattr(self, name)
            for name in SCALAR_FEATURES
            if getattr(self, name) is not None
        }
        if self.mfcc is not None:
            data["mfcc"] = list(self.mfcc)
        return data


FeatureSeries = Sequence[FeatureFrame]


@dataclass(frozen=True)
class Stat:
    """Mean and population standard deviation of one feature column

    Attributes:
        mean: Arithmetic mean (0.0 for an empty column)
        std_dev: Population standard deviation, divides by N (0.0 when empty)
        count: Number of valid values the statistic was computed over
    """
    mean: float = 0.0
    std_dev: float = 0.0
    count: int = 0

    @property
    def is_empty(self) -> bool:
        return self.count == 0


@dataclass(frozen=True)
class FeatureStats:
    """Per-column statistics over a feature series"""
    rms: Stat
    spectral_centroid: Stat
    spectral_flatness: Stat
    spectral_slope: Stat
    spectral_rolloff: Stat
    mfcc: List[Stat] = field(default_factory=list)
