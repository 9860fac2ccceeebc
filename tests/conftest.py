"""Global pytest configuration and fixtures for all tests."""

from pathlib import Path

import pytest
from loguru import logger

from localhost_ca.config import get_settings
from localhost_ca.issuer import Issuer


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    Point HOME and XDG_STATE_HOME at a temporary directory.

    Keeps the real ~/.local/state and ~/.localhost untouched by any code
    path that falls back to the defaults.
    """
    home = tmp_path / "home"
    home.mkdir()

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_STATE_HOME", str(home / ".local" / "state"))

    get_settings.cache_clear()
    yield home
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def issuer(tmp_path_factory: pytest.TempPathFactory) -> Issuer:
    """
    A saved development issuer shared by the whole session.

    4096-bit key generation is slow, so it happens once.
    """
    return Issuer.fetch(path=tmp_path_factory.mktemp("issuer"))


@pytest.fixture
def state_env(tmp_path: Path) -> dict[str, str]:
    """Environment mapping pointing at a fresh state home."""
    return {"XDG_STATE_HOME": str(tmp_path / "state")}


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop loguru sinks installed during a test."""
    yield
    logger.remove()
