"""App-message keys and payload constructors shared with the watch app."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeAlias

AppMessage: TypeAlias = dict[str, Any]
Emit: TypeAlias = Callable[[AppMessage], Awaitable[None]]

REQUEST_CHAT = "REQUEST_CHAT"
RESPONSE_TEXT = "RESPONSE_TEXT"
RESPONSE_END = "RESPONSE_END"
READY_STATUS = "READY_STATUS"
# Host-side event carrying the settings page response (URL-encoded JSON).
SETTINGS_RESPONSE = "SETTINGS_RESPONSE"


def response_text(text: str) -> AppMessage:
    return {RESPONSE_TEXT: text}


def response_end() -> AppMessage:
    return {RESPONSE_END: 1}


def ready_status(ready: bool) -> AppMessage:
    return {READY_STATUS: 1 if ready else 0}
