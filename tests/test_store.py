from __future__ import annotations

import json
from pathlib import Path
from urllib.parse import quote

import pytest

from pebblechat.config import DEFAULT_BASE_URL, DEFAULT_MODEL, DEFAULT_SYSTEM_MESSAGE, ChatConfig, Settings
from pebblechat.errors import InvalidSettingsPayloadError
from pebblechat.store import SettingsStore, configuration_url


def test_empty_store_snapshot_uses_defaults(store: SettingsStore) -> None:
    config = store.snapshot()

    assert config == ChatConfig(api_key=None)
    assert config.base_url == DEFAULT_BASE_URL
    assert config.model == DEFAULT_MODEL
    assert config.system_message == DEFAULT_SYSTEM_MESSAGE
    assert not store.is_ready()


def test_apply_saves_non_blank_and_clears_the_rest(store: SettingsStore, settings: Settings) -> None:
    store.apply({"api_key": "sk-1", "model": "claude-x", "web_search_enabled": "true"})
    store.apply({"api_key": "sk-2", "model": "  ", "base_url": ""})

    assert store.values() == {"api_key": "sk-2"}
    assert json.loads(settings.settings_file.read_text(encoding="utf-8")) == {"api_key": "sk-2"}


def test_values_survive_reload(store: SettingsStore, settings: Settings) -> None:
    store.apply({"api_key": "sk-1", "web_search_enabled": "true", "mcp_servers": "[]"})

    reloaded = SettingsStore(settings)
    config = reloaded.snapshot()

    assert config.api_key == "sk-1"
    assert config.web_search_enabled is True
    assert config.mcp_servers == "[]"


def test_snapshot_is_not_affected_by_later_changes(store: SettingsStore) -> None:
    store.apply({"api_key": "sk-1", "model": "first"})
    snapshot = store.snapshot()

    store.apply({"api_key": "sk-1", "model": "second"})

    assert snapshot.model == "first"
    assert store.snapshot().model == "second"


def test_web_search_flag_requires_exact_true(store: SettingsStore) -> None:
    store.apply({"api_key": "k", "web_search_enabled": "yes"})
    assert store.snapshot().web_search_enabled is False


def test_listeners_receive_readiness(store: SettingsStore) -> None:
    seen: list[bool] = []
    unsubscribe = store.on_change(seen.append)

    store.apply({"api_key": "sk-1"})
    store.apply({})
    unsubscribe()
    store.apply({"api_key": "sk-1"})

    assert seen == [True, False]


def test_whitespace_api_key_is_not_ready(store: SettingsStore) -> None:
    store.set("api_key", "   ")
    assert not store.is_ready()


def test_set_rejects_unknown_keys(store: SettingsStore) -> None:
    with pytest.raises(KeyError):
        store.set("colour", "red")


def test_set_keeps_other_values(store: SettingsStore) -> None:
    store.apply({"api_key": "sk-1", "model": "m"})
    store.set("model", "")

    assert store.values() == {"api_key": "sk-1"}


def test_apply_response_decodes_url_encoded_json(store: SettingsStore) -> None:
    raw = quote(json.dumps({"api_key": "sk-9", "system_message": "Be brief & kind", "extra": "ignored"}))

    store.apply_response(raw)

    assert store.values() == {"api_key": "sk-9", "system_message": "Be brief & kind"}


@pytest.mark.parametrize("raw", ["%7Bbroken", quote('["a"]')])
def test_apply_response_rejects_invalid_payloads(store: SettingsStore, raw: str) -> None:
    with pytest.raises(InvalidSettingsPayloadError):
        store.apply_response(raw)


def test_env_defaults_are_overridden_by_saved_values(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PEBBLECHAT_API_KEY", "sk-env")
    monkeypatch.setenv("PEBBLECHAT_MODEL", "env-model")
    store = SettingsStore(Settings(home=tmp_path / "env-home"))

    assert store.is_ready()
    assert store.snapshot().model == "env-model"

    store.set("model", "saved-model")
    assert store.snapshot().model == "saved-model"
    assert store.snapshot().api_key == "sk-env"


def test_corrupt_settings_file_is_ignored(settings: Settings) -> None:
    settings.settings_file.parent.mkdir(parents=True)
    settings.settings_file.write_text("{oops", encoding="utf-8")

    assert SettingsStore(settings).values() == {}


def test_configuration_url_encodes_all_keys(store: SettingsStore) -> None:
    store.apply({"api_key": "sk/1", "system_message": "Hi there!"})

    url = configuration_url("https://example.com/config/", store)

    assert url == (
        "https://example.com/config/?api_key=sk%2F1&base_url=&model="
        "&system_message=Hi%20there!&web_search_enabled=false&mcp_servers="
    )
