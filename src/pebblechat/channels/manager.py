"""Channel manager."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable

from loguru import logger

from pebblechat.appmessage import ready_status
from pebblechat.channels.base import BaseChannel
from pebblechat.channels.bus import MessageBus
from pebblechat.channels.events import InboundMessage
from pebblechat.errors import InvalidSettingsPayloadError
from pebblechat.orchestrator import ChatOrchestrator
from pebblechat.store import SettingsStore


class ChannelManager:
    """Route chat requests to the orchestrator and deliver its app messages back."""

    def __init__(self, bus: MessageBus, orchestrator: ChatOrchestrator, store: SettingsStore) -> None:
        self.bus = bus
        self.orchestrator = orchestrator
        self.store = store
        self._channels: dict[str, BaseChannel] = {}
        self._tasks: list[asyncio.Task[None]] = []
        self._pending: set[asyncio.Task[None]] = set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._unsubscribers: list[Callable[[], None]] = []

    def register(self, channel: BaseChannel) -> None:
        self._channels[channel.name] = channel

    @property
    def channels(self) -> dict[str, BaseChannel]:
        return dict(self._channels)

    def enabled_channels(self) -> Iterable[str]:
        return self._channels.keys()

    async def start(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._unsubscribers = [
            self.bus.on_inbound(self._handle_inbound),
            self.store.on_change(self._handle_settings_change),
        ]
        for name, channel in self._channels.items():
            self._unsubscribers.append(self.bus.on_response(name, channel.send))
        await self.announce_ready(self.store.is_ready())
        for channel in self._channels.values():
            self._tasks.append(asyncio.create_task(channel.start()))

    async def wait_closed(self) -> None:
        """Wait for every channel to finish, then for in-flight requests to complete."""

        for task in list(self._tasks):
            try:
                await task
            except asyncio.CancelledError:
                continue
        await self.drain()

    async def drain(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def stop(self) -> None:
        for channel in self._channels.values():
            await channel.stop()
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                continue
        self._tasks.clear()
        await self.drain()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    async def announce_ready(self, ready: bool) -> None:
        logger.info("channels.ready_status ready={}", ready)
        for name in self._channels:
            await self.bus.publish_response(name, ready_status(ready))

    def _handle_settings_change(self, ready: bool) -> None:
        if self._loop is None:
            return
        self._track(self._loop.create_task(self.announce_ready(ready)))

    async def _handle_inbound(self, message: InboundMessage) -> None:
        if self._loop is None:
            return
        self._track(self._loop.create_task(self._process_inbound(message)))

    def _track(self, task: asyncio.Task[None]) -> None:
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _process_inbound(self, message: InboundMessage) -> None:
        if (raw_settings := message.settings_response) is not None:
            try:
                self.store.apply_response(raw_settings)
            except InvalidSettingsPayloadError:
                logger.opt(exception=True).warning("channels.settings.invalid channel={}", message.channel)
            return

        encoded = message.chat_request
        if encoded is None:
            logger.debug("channels.inbound.ignored channel={} keys={}", message.channel, sorted(message.payload))
            return

        logger.info("channels.chat_request channel={}", message.channel)

        try:
            await self.orchestrator.handle(encoded, self.store.snapshot(), self.bus.responder(message.channel))
        except Exception:
            logger.exception("channels.chat.error channel={}", message.channel)
