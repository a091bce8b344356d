"""Terminal classification of one chat request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, TypeAlias

CONFIG_MISSING_TEXT = "No API key configured. Please configure in settings."
EMPTY_TRANSCRIPT_TEXT = "Nothing to send: the conversation is empty."
NETWORK_ERROR_TEXT = "Network error occurred"
TIMEOUT_TEXT = "Request timed out. Likely problems on Anthropic's side."
MALFORMED_RESPONSE_TEXT = "Error parsing response"


@dataclass(frozen=True)
class Success:
    text: str

    @property
    def message(self) -> str:
        return self.text


@dataclass(frozen=True)
class ApiError:
    status: int
    detail: str

    @property
    def message(self) -> str:
        return f"Error {self.status}: {self.detail}"


@dataclass(frozen=True)
class _Fixed:
    """Outcome with a fixed user-facing message."""

    text: ClassVar[str] = ""

    @property
    def message(self) -> str:
        return self.text


@dataclass(frozen=True)
class NetworkError(_Fixed):
    text: ClassVar[str] = NETWORK_ERROR_TEXT


@dataclass(frozen=True)
class Timeout(_Fixed):
    text: ClassVar[str] = TIMEOUT_TEXT


@dataclass(frozen=True)
class ConfigMissing(_Fixed):
    text: ClassVar[str] = CONFIG_MISSING_TEXT


@dataclass(frozen=True)
class MalformedResponse(_Fixed):
    text: ClassVar[str] = MALFORMED_RESPONSE_TEXT


@dataclass(frozen=True)
class EmptyTranscript(_Fixed):
    text: ClassVar[str] = EMPTY_TRANSCRIPT_TEXT


Outcome: TypeAlias = Success | ApiError | NetworkError | Timeout | ConfigMissing | MalformedResponse | EmptyTranscript
