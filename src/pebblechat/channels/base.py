"""Base channel interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pebblechat.appmessage import AppMessage
from pebblechat.channels.bus import MessageBus
from pebblechat.channels.events import InboundMessage, OutboundMessage


class BaseChannel(ABC):
    """Abstract base class for device transport adapters."""

    name: str = "base"

    def __init__(self, bus: MessageBus) -> None:
        self.bus = bus
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @abstractmethod
    async def start(self) -> None:
        """Start receiving app messages from the device."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop the channel and release its resources."""

    @abstractmethod
    async def send(self, message: OutboundMessage) -> None:
        """Deliver one app message to the device."""

    async def publish_inbound(self, payload: AppMessage) -> None:
        await self.bus.publish_inbound(InboundMessage(channel=self.name, payload=payload))
