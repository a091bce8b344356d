"""Device transport channels."""

from pebblechat.channels.base import BaseChannel
from pebblechat.channels.bus import MessageBus
from pebblechat.channels.events import InboundMessage, OutboundMessage
from pebblechat.channels.manager import ChannelManager
from pebblechat.channels.stdio import StdioChannel

__all__ = ["BaseChannel", "ChannelManager", "InboundMessage", "MessageBus", "OutboundMessage", "StdioChannel"]
