from __future__ import annotations

import pytest

from pebblechat.channels.bus import MessageBus
from pebblechat.channels.events import InboundMessage, OutboundMessage


@pytest.mark.asyncio
async def test_inbound_reaches_subscribers_until_unsubscribed() -> None:
    bus = MessageBus()
    inbound: list[InboundMessage] = []

    async def on_inbound(message: InboundMessage) -> None:
        inbound.append(message)

    unsubscribe = bus.on_inbound(on_inbound)
    await bus.publish_inbound(InboundMessage(channel="watch", payload={"REQUEST_CHAT": "[U]hi"}))
    unsubscribe()
    await bus.publish_inbound(InboundMessage(channel="watch", payload={"REQUEST_CHAT": "[U]again"}))

    assert [message.chat_request for message in inbound] == ["[U]hi"]


@pytest.mark.asyncio
async def test_responses_are_routed_by_channel_name() -> None:
    bus = MessageBus()
    watch: list[OutboundMessage] = []
    other: list[OutboundMessage] = []

    async def on_watch(message: OutboundMessage) -> None:
        watch.append(message)

    async def on_other(message: OutboundMessage) -> None:
        other.append(message)

    bus.on_response("watch", on_watch)
    bus.on_response("other", on_other)

    assert await bus.publish_response("watch", {"RESPONSE_END": 1})

    assert [message.render() for message in watch] == ['{"RESPONSE_END": 1}']
    assert other == []


@pytest.mark.asyncio
async def test_responder_emits_in_order_and_reports_undelivered() -> None:
    bus = MessageBus()
    received: list[dict[str, object]] = []

    async def on_watch(message: OutboundMessage) -> None:
        received.append(message.payload)

    unsubscribe = bus.on_response("watch", on_watch)
    emit = bus.responder("watch")
    await emit({"RESPONSE_TEXT": "hi"})
    await emit({"RESPONSE_END": 1})
    unsubscribe()

    assert received == [{"RESPONSE_TEXT": "hi"}, {"RESPONSE_END": 1}]
    assert await bus.publish_response("watch", {"READY_STATUS": 1}) is False


def test_inbound_accessors_ignore_blank_and_non_string_values() -> None:
    assert InboundMessage(channel="w", payload={"REQUEST_CHAT": ""}).chat_request is None
    assert InboundMessage(channel="w", payload={"REQUEST_CHAT": 5}).chat_request is None
    assert InboundMessage(channel="w", payload={"SETTINGS_RESPONSE": "%7B%7D"}).settings_response == "%7B%7D"
