"""Pytest configuration and fixtures"""

import pytest
from hypothesis import settings, Verbosity

from voicemood.config import config_loader

# Register Hypothesis profiles
settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=20, verbosity=Verbosity.normal)
settings.register_profile("debug", max_examples=10, verbosity=Verbosity.verbose)

# Use CI profile by default
settings.load_profile("ci")


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Point the config loader at an empty project root under tmp_path.

    Returns the config/ directory; tests write config.yaml or
    config.<env>.yaml files into it before constructing Config().
    """
    monkeypatch.setattr(config_loader, 'PROJECT_ROOT', tmp_path)
    monkeypatch.delenv('VOICEMOOD_ENV', raising=False)
    path = tmp_path / "config"
    path.mkdir()
    return path
