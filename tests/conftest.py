"""Keep every test away from the real user's profile directories."""
import pytest


@pytest.fixture(autouse=True)
def _isolated_profile_dirs(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
