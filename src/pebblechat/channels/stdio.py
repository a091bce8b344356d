"""JSON-lines channel over a pair of text streams."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import TextIO

from loguru import logger

from pebblechat.channels.base import BaseChannel
from pebblechat.channels.bus import MessageBus
from pebblechat.channels.events import OutboundMessage


class StdioChannel(BaseChannel):
    """Reads one JSON app message per input line and writes one per output line.

    Useful for driving the bridge from a phone-side relay process or by hand:
    ``{"REQUEST_CHAT": "[U]hello"}`` in, ``{"RESPONSE_TEXT": ...}`` and
    ``{"RESPONSE_END": 1}`` out.
    """

    name = "stdio"

    def __init__(self, bus: MessageBus, *, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        super().__init__(bus)
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout

    async def start(self) -> None:
        self._running = True
        logger.info("stdio.channel.start")
        while self._running:
            line = await asyncio.to_thread(self._stdin.readline)
            if not line:
                break
            line = line.strip()
            if not line:
                continue
            try:
                payload = json.loads(line)
            except json.JSONDecodeError as exc:
                logger.warning("stdio.channel.invalid_line error={}", exc)
                continue
            if not isinstance(payload, dict):
                logger.warning("stdio.channel.invalid_line type={}", type(payload).__name__)
                continue
            await self.publish_inbound(payload)
        self._running = False
        logger.info("stdio.channel.eof")

    async def stop(self) -> None:
        self._running = False

    async def send(self, message: OutboundMessage) -> None:
        print(message.render(), file=self._stdout, flush=True)
