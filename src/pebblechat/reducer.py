"""Fold a Messages API content-block list into one display string."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, TypeAlias

from loguru import logger

NO_RESPONSE_TEXT = "No response from Claude"
TOOL_BREAK = "\n\n"


@dataclass(frozen=True)
class TextBlock:
    text: str


@dataclass(frozen=True)
class McpToolUseBlock:
    name: str | None = None
    server_name: str | None = None


@dataclass(frozen=True)
class McpToolResultBlock:
    tool_use_id: str | None = None


@dataclass(frozen=True)
class ServerToolUseBlock:
    name: str | None = None


@dataclass(frozen=True)
class UnknownBlock:
    """Any block type this bridge does not understand; kept so it can be logged."""

    type: str


ContentBlock: TypeAlias = TextBlock | McpToolUseBlock | McpToolResultBlock | ServerToolUseBlock | UnknownBlock


def parse_block(raw: Any) -> ContentBlock:
    if not isinstance(raw, dict):
        return UnknownBlock(type=type(raw).__name__)
    block_type = str(raw.get("type", ""))
    match block_type:
        case "text":
            return TextBlock(text=str(raw.get("text") or ""))
        case "mcp_tool_use":
            return McpToolUseBlock(name=raw.get("name"), server_name=raw.get("server_name"))
        case "mcp_tool_result":
            return McpToolResultBlock(tool_use_id=raw.get("tool_use_id"))
        case "server_tool_use":
            return ServerToolUseBlock(name=raw.get("name"))
        case _:
            return UnknownBlock(type=block_type)


def parse_blocks(raw: Iterable[Any]) -> list[ContentBlock]:
    return [parse_block(item) for item in raw]


def reduce_blocks(blocks: Iterable[ContentBlock]) -> str:
    """Concatenate text blocks, breaking paragraphs after tool results.

    Never returns an empty string: an empty result becomes NO_RESPONSE_TEXT.
    """

    parts: list[str] = []
    tool_uses = 0
    for block in blocks:
        match block:
            case TextBlock(text=text):
                parts.append(text)
            case McpToolUseBlock(name=name, server_name=server_name):
                tool_uses += 1
                logger.debug("reducer.mcp_tool_use name={} server={}", name, server_name)
            case McpToolResultBlock(tool_use_id=tool_use_id):
                logger.debug("reducer.mcp_tool_result tool_use_id={}", tool_use_id)
                parts.append(TOOL_BREAK)
            case ServerToolUseBlock():
                parts.append(TOOL_BREAK)
            case UnknownBlock(type=block_type):
                logger.debug("reducer.block.ignored type={}", block_type)

    if tool_uses:
        logger.info("reducer.mcp_tools_used count={}", tool_uses)

    text = "".join(parts).strip()
    if not text:
        logger.info("reducer.empty")
        return NO_RESPONSE_TEXT
    return text
