"""Shared fixtures for docker-secrets tests."""
from pathlib import Path

import pytest


@pytest.fixture
def temp_home(tmp_path, monkeypatch):
    """Fixture to create a temporary home directory and a clean environment."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setattr(Path, "home", lambda: fake_home)

    for name in ("DOCKER_SECRETS_CONFIG", "SECRETS_FILE_BASE_DIR", "SECRETS_FILE_SEPARATOR"):
        monkeypatch.delenv(name, raising=False)

    return fake_home


@pytest.fixture
def secrets_dir(tmp_path):
    """Fixture to create an empty secrets directory."""
    directory = tmp_path / "secrets"
    directory.mkdir()
    return directory


@pytest.fixture
def write_secret():
    """Fixture returning a helper that creates a secret file."""
    def _write(directory: Path, name: str, content: str = "value") -> Path:
        path = directory / name
        path.write_text(content)
        return path
    return _write
