"""Codec for the flattened conversation transcript sent by the watch.

The watch encodes a conversation as alternating role markers and text, for
example ``"[U]hello[A]hi there[U]what time is it?"``. There is no escaping, so a
literal ``[U]`` or ``[A]`` inside a message is read as a role switch. The watch
firmware depends on this exact grammar, so the ambiguity is kept as-is.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

USER_MARKER = "[U]"
ASSISTANT_MARKER = "[A]"

_MARKER_RE = re.compile(r"(\[U\]|\[A\])")


class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


_MARKER_ROLES: dict[str, Role] = {USER_MARKER: Role.USER, ASSISTANT_MARKER: Role.ASSISTANT}
_ROLE_MARKERS: dict[Role, str] = {role: marker for marker, role in _MARKER_ROLES.items()}


@dataclass(frozen=True)
class Turn:
    """One role-tagged message in a conversation."""

    role: Role
    content: str

    def to_message(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


def decode(encoded: str) -> list[Turn]:
    """Parse an encoded transcript into turns.

    A marker sets the current role; the next non-empty text segment becomes a
    turn with that role and clears it. Text without a preceding marker and
    markers without following text are dropped. Malformed input never raises.
    """

    turns: list[Turn] = []
    current: Role | None = None
    for piece in _MARKER_RE.split(encoded):
        role = _MARKER_ROLES.get(piece)
        if role is not None:
            current = role
        elif piece and current is not None:
            turns.append(Turn(role=current, content=piece))
            current = None
    return turns


def encode(turns: Iterable[Turn]) -> str:
    """Flatten turns into the watch's transcript format."""

    return "".join(f"{_ROLE_MARKERS[turn.role]}{turn.content}" for turn in turns if turn.content)
