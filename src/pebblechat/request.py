"""Build the Messages API request for one chat turn."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger

from pebblechat.config import ChatConfig
from pebblechat.errors import ApiKeyNotConfiguredError
from pebblechat.transcript import Turn

ANTHROPIC_VERSION = "2023-06-01"
MCP_BETA = "mcp-client-2025-04-04"
WEB_SEARCH_TOOL: dict[str, Any] = {"type": "web_search_20250305", "name": "web_search", "max_uses": 5}


def exclude_none(d: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


@dataclass(frozen=True)
class ChatRequest:
    """One ready-to-send POST: target URL, headers and JSON body."""

    url: str
    headers: dict[str, str]
    payload: dict[str, Any]
    timeout_seconds: float

    @property
    def message_count(self) -> int:
        return len(self.payload["messages"])


def parse_mcp_servers(raw: str | None) -> list[Any] | None:
    """Parse the configured MCP server list; invalid or empty lists yield None."""

    if raw is None or not raw.strip():
        return None
    try:
        servers = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("request.mcp_servers.invalid error={}", exc)
        return None
    if not isinstance(servers, list) or not servers:
        return None
    logger.info("request.mcp_servers count={}", len(servers))
    return servers


def build_payload(turns: Sequence[Turn], config: ChatConfig) -> dict[str, Any]:
    return exclude_none({
        "model": config.model,
        "max_tokens": config.max_tokens,
        "messages": [turn.to_message() for turn in turns],
        "system": config.system_message or None,
        "tools": [dict(WEB_SEARCH_TOOL)] if config.web_search_enabled else None,
        "mcp_servers": parse_mcp_servers(config.mcp_servers),
    })


def build_headers(config: ChatConfig) -> dict[str, str]:
    headers = {
        "content-type": "application/json",
        "x-api-key": config.api_key or "",
        "anthropic-version": ANTHROPIC_VERSION,
    }
    # The beta header follows the raw setting, even when the list fails to parse.
    if config.has_mcp_servers:
        headers["anthropic-beta"] = MCP_BETA
    return headers


def build_request(turns: Sequence[Turn], config: ChatConfig) -> ChatRequest:
    """Assemble the request, or raise ApiKeyNotConfiguredError without touching the network."""

    if not config.has_credential:
        raise ApiKeyNotConfiguredError("no API key configured")
    return ChatRequest(
        url=config.base_url,
        headers=build_headers(config),
        payload=build_payload(turns, config),
        timeout_seconds=config.timeout_seconds,
    )
