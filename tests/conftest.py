from __future__ import annotations

from pathlib import Path

import pytest

from pebblechat.config import USER_SETTING_KEYS, Settings
from pebblechat.store import SettingsStore


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for key in USER_SETTING_KEYS:
        monkeypatch.delenv(f"PEBBLECHAT_{key.upper()}", raising=False)
    monkeypatch.setenv("PEBBLECHAT_HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(home=tmp_path / "home")


@pytest.fixture
def store(settings: Settings) -> SettingsStore:
    return SettingsStore(settings)
