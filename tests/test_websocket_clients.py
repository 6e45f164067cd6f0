import asyncio
import json

import pytest
from websockets.asyncio.server import serve

from oracle_relay.core.client.consensus_channel import ConsensusChannel
from oracle_relay.core.subscriber.feed_subscriber import FeedSubscriber, stream_url
from oracle_relay.utils.errors import DeliveryError


def test_stream_url():
    assert stream_url("wss://data-stream.binance.vision/ws/", "BTCUSDT") == \
        "wss://data-stream.binance.vision/ws/btcusdt@aggTrade"


@pytest.mark.asyncio
async def test_send_without_connection_raises():
    channel = ConsensusChannel(url="ws://127.0.0.1:1")
    with pytest.raises(DeliveryError):
        await channel.send(b"{}")


@pytest.mark.asyncio
async def test_channel_sends_binary_frames():
    received = asyncio.Queue()

    async def handler(ws):
        async for message in ws:
            await received.put(message)

    async with serve(handler, "127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        channel = ConsensusChannel(url=f"ws://127.0.0.1:{port}")
        await channel.start()
        assert await channel.wait_connected(timeout=5)
        assert channel.connected

        await channel.send(b'{"MessageType":0}')
        message = await asyncio.wait_for(received.get(), timeout=5)
        assert message == b'{"MessageType":0}'
        await channel.stop()
        assert not channel.connected


@pytest.mark.asyncio
async def test_feed_subscriber_forwards_each_frame():
    paths = []

    async def handler(ws):
        paths.append(ws.request.path)
        await ws.send(json.dumps({"s": "BTCUSDT", "p": "27000.5", "E": 1700000000123}))
        await ws.wait_closed()

    ticks = asyncio.Queue()

    async def on_tick(message):
        await ticks.put(json.loads(message))

    async with serve(handler, "127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        feeds = FeedSubscriber(on_tick, symbols=["btcusdt"], base_url=f"ws://127.0.0.1:{port}")
        await feeds.start()
        tick = await asyncio.wait_for(ticks.get(), timeout=5)
        await feeds.stop()

    assert tick["s"] == "BTCUSDT"
    assert paths == ["/btcusdt@aggTrade"]


@pytest.mark.asyncio
async def test_feed_subscriber_reconnects_after_server_close():
    connections = []

    async def handler(ws):
        connections.append(ws.request.path)
        await ws.send(json.dumps({"s": "BTCUSDT", "p": str(27000 + len(connections)), "E": 1700000000123}))
        if len(connections) == 1:
            await ws.close()
            return
        await ws.wait_closed()

    ticks = asyncio.Queue()

    async def on_tick(message):
        await ticks.put(json.loads(message))

    async with serve(handler, "127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        feeds = FeedSubscriber(on_tick, symbols=["btcusdt"], base_url=f"ws://127.0.0.1:{port}")
        await feeds.start()
        first = await asyncio.wait_for(ticks.get(), timeout=5)
        second = await asyncio.wait_for(ticks.get(), timeout=5)
        await feeds.stop()

    assert (first["p"], second["p"]) == ("27001", "27002")
    assert connections == ["/btcusdt@aggTrade", "/btcusdt@aggTrade"]
