"""App-message bus between device channels and the bridge."""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Any

from blinker import ANY, Signal
from loguru import logger

from pebblechat.appmessage import AppMessage, Emit
from pebblechat.channels.events import InboundMessage, OutboundMessage

InboundHandler = Callable[[InboundMessage], Coroutine[Any, Any, None]]
ResponseHandler = Callable[[OutboundMessage], Coroutine[Any, Any, None]]


class MessageBus:
    """Routes app messages by channel name.

    Inbound messages reach every bridge subscriber; responses are sent with
    the channel name as blinker sender, so each channel only receives its own.
    """

    def __init__(self) -> None:
        self._from_device = Signal("pebblechat.from_device")
        self._to_device = Signal("pebblechat.to_device")

    async def publish_inbound(self, message: InboundMessage) -> None:
        await self._from_device.send_async(message.channel, message=message)

    async def publish_response(self, channel: str, payload: AppMessage) -> bool:
        """Deliver one app message to a channel; False when no channel is listening."""

        delivered = await self._to_device.send_async(channel, message=OutboundMessage(channel=channel, payload=payload))
        if not delivered:
            logger.warning("bus.response.undelivered channel={} keys={}", channel, sorted(payload))
            return False
        return True

    def responder(self, channel: str) -> Emit:
        async def emit(payload: AppMessage) -> None:
            await self.publish_response(channel, payload)

        return emit

    def on_inbound(self, handler: InboundHandler) -> Callable[[], None]:
        async def _receiver(sender: Any, *, message: InboundMessage) -> None:
            await handler(message)

        self._from_device.connect(_receiver, sender=ANY, weak=False)
        return lambda: self._from_device.disconnect(_receiver)

    def on_response(self, channel: str, handler: ResponseHandler) -> Callable[[], None]:
        async def _receiver(sender: Any, *, message: OutboundMessage) -> None:
            await handler(message)

        self._to_device.connect(_receiver, sender=channel, weak=False)
        return lambda: self._to_device.disconnect(_receiver, sender=channel)
