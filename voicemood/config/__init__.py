"""Configuration management"""

from voicemood.config.config_loader import Config, config

__all__ = ['Config', 'config']
