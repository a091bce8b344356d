"""Channel bus event models."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime

from pebblechat.appmessage import REQUEST_CHAT, SETTINGS_RESPONSE, AppMessage


def _string_field(payload: AppMessage, key: str) -> str | None:
    value = payload.get(key)
    if isinstance(value, str) and value:
        return value
    return None


@dataclass(frozen=True)
class InboundMessage:
    """App message received from one device channel."""

    channel: str
    payload: AppMessage
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def chat_request(self) -> str | None:
        return _string_field(self.payload, REQUEST_CHAT)

    @property
    def settings_response(self) -> str | None:
        return _string_field(self.payload, SETTINGS_RESPONSE)


@dataclass(frozen=True)
class OutboundMessage:
    """App message to deliver to one device channel."""

    channel: str
    payload: AppMessage

    def render(self) -> str:
        return json.dumps(self.payload, ensure_ascii=False)
