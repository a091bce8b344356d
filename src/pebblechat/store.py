"""Persisted user settings, the bridge's counterpart of the watch app's local storage."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, TypeAlias
from urllib.parse import quote, unquote

from loguru import logger

from pebblechat.config import USER_SETTING_KEYS, ChatConfig, Settings
from pebblechat.errors import InvalidSettingsPayloadError

ChangeListener: TypeAlias = Callable[[bool], None]

# Characters encodeURIComponent leaves as-is.
_URI_SAFE = "!~*'()"


class SettingsStore:
    """Key-value store for the six user settings, backed by a JSON file.

    Values are plain strings, exactly as the settings page submits them.
    Env defaults from Settings fill keys that were never saved.
    """

    def __init__(self, settings: Settings, *, path: Path | None = None) -> None:
        self.settings = settings
        self.path = path if path is not None else settings.settings_file
        self._values: dict[str, str] = self._load()
        self._listeners: list[ChangeListener] = []

    def _load(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("store.load_failed path={} error={}", self.path, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        return {key: str(value) for key, value in data.items() if key in USER_SETTING_KEYS and value}

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._values, indent=2, ensure_ascii=False), encoding="utf-8")

    def get(self, key: str) -> str | None:
        return self._values.get(key) or self.settings.user_defaults().get(key)

    def values(self) -> dict[str, str]:
        return {**self.settings.user_defaults(), **self._values}

    def snapshot(self) -> ChatConfig:
        """Freeze the current values; later changes do not affect the snapshot."""

        return ChatConfig.from_values(self.values(), self.settings)

    def is_ready(self) -> bool:
        api_key = self.get("api_key")
        return bool(api_key and api_key.strip())

    def on_change(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def apply(self, update: Mapping[str, Any]) -> None:
        """Save each non-blank key and clear the rest, then notify listeners with readiness."""

        for key in USER_SETTING_KEYS:
            value = update.get(key)
            if isinstance(value, str) and value.strip():
                self._values[key] = value
                logger.info("store.saved key={}", key)
            else:
                self._values.pop(key, None)
                logger.info("store.cleared key={}", key)
        self._save()
        ready = self.is_ready()
        for listener in list(self._listeners):
            listener(ready)

    def apply_response(self, raw: str) -> None:
        """Apply the URL-encoded JSON object returned by the settings page."""

        try:
            data = json.loads(unquote(raw))
        except json.JSONDecodeError as exc:
            raise InvalidSettingsPayloadError(f"settings payload is not JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise InvalidSettingsPayloadError("settings payload must be a JSON object")
        self.apply(data)

    def set(self, key: str, value: str | None) -> None:
        if key not in USER_SETTING_KEYS:
            raise KeyError(key)
        update: dict[str, Any] = dict(self._values)
        update[key] = value
        self.apply(update)


def configuration_url(page_url: str, store: SettingsStore) -> str:
    """Build the settings page URL pre-filled with the saved values."""

    values = store.values()
    values.setdefault("web_search_enabled", "false")
    query = "&".join(f"{key}={quote(values.get(key, ''), safe=_URI_SAFE)}" for key in USER_SETTING_KEYS)
    return f"{page_url}?{query}"
