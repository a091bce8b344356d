"""Single round-trip orchestration for one chat request."""

from __future__ import annotations

import asyncio
from enum import StrEnum

import httpx
from loguru import logger

from pebblechat.appmessage import Emit, response_end, response_text
from pebblechat.config import ChatConfig
from pebblechat.errors import ApiKeyNotConfiguredError
from pebblechat.outcome import (
    ApiError,
    ConfigMissing,
    EmptyTranscript,
    MalformedResponse,
    NetworkError,
    Outcome,
    Success,
    Timeout,
)
from pebblechat.reducer import NO_RESPONSE_TEXT, parse_blocks, reduce_blocks
from pebblechat.request import ChatRequest, build_request
from pebblechat.transcript import decode

ELLIPSIS = "…"


class CallState(StrEnum):
    IDLE = "idle"
    CONFIG_CHECK = "config_check"
    DISPATCHED = "dispatched"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    DONE = "done"


def truncate(text: str, limit: int) -> str:
    if limit <= 0 or len(text) <= limit:
        return text
    return text[: max(limit - len(ELLIPSIS), 0)] + ELLIPSIS


def outcome_from_success(response: httpx.Response) -> Outcome:
    try:
        data = response.json()
    except ValueError as exc:
        logger.warning("chat.response.unparseable error={}", exc)
        return MalformedResponse()
    if not isinstance(data, dict):
        logger.warning("chat.response.not_an_object type={}", type(data).__name__)
        return MalformedResponse()
    content = data.get("content")
    if not isinstance(content, list) or not content:
        logger.info("chat.response.no_content")
        return Success(NO_RESPONSE_TEXT)
    if any(block is None for block in content):
        logger.warning("chat.response.null_block")
        return MalformedResponse()
    return Success(reduce_blocks(parse_blocks(content)))


def outcome_from_error(response: httpx.Response) -> Outcome:
    detail = response.text
    try:
        data = response.json()
    except ValueError as exc:
        logger.debug("chat.error_body.unparseable error={}", exc)
    else:
        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict) and error.get("message"):
            detail = str(error["message"])
    logger.warning("chat.api_error status={} body={}", response.status_code, response.text)
    return ApiError(status=response.status_code, detail=detail)


class ChatOrchestrator:
    """Owns the request slot: decode, build, dispatch once, then emit result and end.

    Requests are serialized; one that arrives while another is in flight waits
    for the slot, so the two-emission sequences of different requests never
    interleave.
    """

    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport
        self._slot = asyncio.Lock()
        self._state = CallState.IDLE

    @property
    def state(self) -> CallState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._slot.locked()

    async def handle(self, encoded: str, config: ChatConfig, emit: Emit) -> Outcome:
        """Run one request to completion; always emits RESPONSE_TEXT then RESPONSE_END."""

        if self.busy:
            logger.info("chat.queued state={}", self._state)
        async with self._slot:
            try:
                outcome = await self._classify(encoded, config)
                logger.info("chat.outcome kind={} state={}", type(outcome).__name__, self._state)
                await self._finish(outcome, config, emit)
            finally:
                self._state = CallState.IDLE
            return outcome

    async def _classify(self, encoded: str, config: ChatConfig) -> Outcome:
        try:
            return await self._run(encoded, config)
        except Exception:
            # Every failure maps to an outcome; RESPONSE_END always follows.
            logger.exception("chat.unexpected_error state={}", self._state)
            self._state = CallState.FAILED
            return NetworkError()

    async def _run(self, encoded: str, config: ChatConfig) -> Outcome:
        turns = decode(encoded)
        logger.info("chat.decoded turns={}", len(turns))

        self._state = CallState.CONFIG_CHECK
        try:
            request = build_request(turns, config)
        except ApiKeyNotConfiguredError:
            logger.warning("chat.config_missing")
            return ConfigMissing()
        if not turns:
            logger.warning("chat.empty_transcript")
            return EmptyTranscript()

        return await self._dispatch(request)

    async def _dispatch(self, request: ChatRequest) -> Outcome:
        self._state = CallState.DISPATCHED
        logger.info("chat.dispatch url={} messages={}", request.url, request.message_count)
        logger.debug("chat.dispatch.payload {}", request.payload)
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=request.timeout_seconds) as client:
                response = await client.post(request.url, headers=request.headers, json=request.payload)
        except httpx.TimeoutException:
            self._state = CallState.TIMED_OUT
            logger.warning("chat.timeout seconds={}", request.timeout_seconds)
            return Timeout()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            self._state = CallState.FAILED
            logger.warning("chat.network_error error={!r}", exc)
            return NetworkError()

        if response.status_code == 200:
            self._state = CallState.COMPLETED
            return outcome_from_success(response)
        self._state = CallState.FAILED
        return outcome_from_error(response)

    async def _finish(self, outcome: Outcome, config: ChatConfig, emit: Emit) -> None:
        self._state = CallState.DONE
        text = truncate(outcome.message, config.response_max_chars)
        try:
            await emit(response_text(text))
        finally:
            await emit(response_end())
