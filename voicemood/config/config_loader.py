"""Configuration loader for VoiceMood"""

import logging
import yaml
from pathlib import Path
from typing import Any, Dict
import os


logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Config:
    """Configuration manager for VoiceMood"""

    def __init__(self, config_path: str = None):
        self._required = config_path is not None
        if config_path is None:
            env = os.getenv('VOICEMOOD_ENV', 'development')
            # Try environment-specific config first, fall back to default
            env_config = PROJECT_ROOT / "config" / f"config.{env}.yaml"
            if env_config.exists():
                config_path = str(env_config)
            else:
                config_path = str(PROJECT_ROOT / "config" / "config.yaml")

        self.config_path = Path(config_path)
        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file"""
        if not self.config_path.exists():
            if self._required:
                raise FileNotFoundError(f"Config file not found: {self.config_path}")
            logger.warning(f"Config file not found: {self.config_path}, using defaults")
            return {}

        with open(self.config_path, 'r') as f:
            return yaml.safe_load(f) or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation

        Args:
            key: Configuration key in dot notation (e.g., 'streaming.window_size')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default

    def __getitem__(self, key: str) -> Any:
        """Allow dictionary-style access"""
        return self.get(key)

    def validate(self) -> None:
        """Validate configuration values"""
        for key in (
            'classifier.min_frames',
            'streaming.window_size',
            'streaming.cadence',
            'extraction.frame_size',
        ):
            value = self.get(key)
            if value is not None and (not isinstance(value, int) or value < 1):
                raise ValueError(f"Invalid {key}: {value}, must be a positive integer")

        # Check Redis connection
        redis_url = self.get('redis.url')
        if redis_url is not None and not str(redis_url).startswith(('redis://', 'rediss://', 'unix://')):
            raise ValueError(f"Invalid Redis URL: {redis_url}")


# Global config instance
config = Config()
