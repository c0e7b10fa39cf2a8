"""Main Application Entry Point

Classifies the mood of a recorded voice clip from the command line:

    python -m voicemood.main <audio_file>

The clip is decoded with librosa, cut into analysis frames, run through the
librosa feature extractor and classified once over the whole recording.
"""

import logging
import sys
from pathlib import Path

import librosa

from voicemood.analysis.extractor import LibrosaFeatureExtractor
from voicemood.analysis.session import analyze_samples
from voicemood.config.config_loader import config
from voicemood.models.results import MoodEstimate


logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """Configure root logging from the 'logging' config section"""
    handlers = [logging.StreamHandler(sys.stderr)]

    log_file = config.get('logging.file')
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=config.get('logging.level', 'INFO'),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def analyze_file(audio_path: str) -> MoodEstimate:
    """Decode an audio file and classify its mood.

    Args:
        audio_path: Path to any format librosa can decode

    Returns:
        Final mood estimate for the recording
    """
    extractor = LibrosaFeatureExtractor()
    samples, _ = librosa.load(audio_path, sr=extractor.sample_rate, mono=True)
    logger.info(f"Loaded {audio_path}: {len(samples) / extractor.sample_rate:.2f}s of audio")
    return analyze_samples(samples, extractor)


def main():
    """Main entry point."""
    setup_logging()
    config.validate()

    if len(sys.argv) < 2:
        logger.error("No audio file provided")
        logger.info("Usage: python -m voicemood.main <audio_file>")
        sys.exit(1)

    audio_path = sys.argv[1]
    if not Path(audio_path).exists():
        logger.error(f"Audio file not found: {audio_path}")
        sys.exit(1)

    try:
        estimate = analyze_file(audio_path)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)

    print(f"{estimate.mood.emoji} {estimate.mood.value} ({estimate.frame_count} frames)")


if __name__ == "__main__":
    main()
