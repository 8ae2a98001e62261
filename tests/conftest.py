"""Pytest configuration and fixtures."""

import os
import sys
from pathlib import Path

import pytest

# Add src to path (for 'servedir.*' imports without an install)
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root / "src"))


@pytest.fixture(autouse=True)
def _reset_logging_state():
    """Keep global verbosity/color settings from leaking between tests."""
    from servedir.core.logging import VerbosityLevel, set_colors, set_verbosity

    set_verbosity(VerbosityLevel.NORMAL)
    set_colors(False)
    yield
    set_verbosity(VerbosityLevel.NORMAL)
    set_colors(True)


@pytest.fixture
def in_tmp_cwd(tmp_path, monkeypatch):
    """Run the test with tmp_path as the working directory.

    Returns:
        The working directory path
    """
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch):
    """SettingsResolver with no config files and no SERVEDIR_* environment.

    Returns:
        SettingsResolver instance
    """
    from servedir.core.config import SettingsResolver

    for key in list(os.environ):
        if key.startswith("SERVEDIR_"):
            monkeypatch.delenv(key)

    return SettingsResolver(
        user_config_path=tmp_path / "missing-user.yaml",
        system_config_path=tmp_path / "missing-system.yaml",
    )
