from __future__ import annotations

import json
from typing import Any

import aiohttp
import pytest

from pydreo.bridge import FanBridge
from pydreo.channel import WebSocketChannel
from pydreo.exceptions import DreoChannelError
from pydreo.models.device import DeviceDescriptor, DeviceSnapshot


class _FakeWs:
    def __init__(self, messages: list[aiohttp.WSMessage] | None = None, *, send_error: Exception | None = None) -> None:
        self.closed = False
        self.sent: list[str] = []
        self._messages = list(messages or [])
        self._send_error = send_error

    async def send_str(self, data: str) -> None:
        if self._send_error is not None:
            raise self._send_error
        self.sent.append(data)

    def exception(self) -> BaseException | None:
        return RuntimeError("boom")

    async def close(self) -> bool:
        self.closed = True
        return True

    def __aiter__(self) -> _FakeWs:
        return self

    async def __anext__(self) -> aiohttp.WSMessage:
        if not self._messages:
            raise StopAsyncIteration
        return self._messages.pop(0)


def _text(payload: dict[str, Any]) -> aiohttp.WSMessage:
    return aiohttp.WSMessage(aiohttp.WSMsgType.TEXT, json.dumps(payload), None)


def _report(serial: str, reported: dict[str, Any]) -> dict[str, Any]:
    return {"devicesn": serial, "method": "report", "reported": reported}


def _bridge(channel: WebSocketChannel, serial: str) -> FanBridge:
    bridge = FanBridge(
        DeviceDescriptor(serial=serial, max_level=6),
        channel,
        snapshot=DeviceSnapshot(power=False, level=1),
    )
    bridge.attach()
    return bridge


@pytest.mark.asyncio
async def test_send_passes_text_through() -> None:
    ws = _FakeWs()
    channel = WebSocketChannel(ws)  # type: ignore[arg-type]

    await channel.send('{"a":1}')

    assert ws.sent == ['{"a":1}']


@pytest.mark.asyncio
async def test_send_on_closed_socket_fails() -> None:
    ws = _FakeWs()
    ws.closed = True
    channel = WebSocketChannel(ws)  # type: ignore[arg-type]

    with pytest.raises(DreoChannelError):
        await channel.send("{}")
    assert ws.sent == []


@pytest.mark.asyncio
async def test_send_transport_error_is_wrapped() -> None:
    ws = _FakeWs(send_error=ConnectionResetError("Cannot write to closing transport"))
    channel = WebSocketChannel(ws)  # type: ignore[arg-type]

    with pytest.raises(DreoChannelError) as exc_info:
        await channel.send("{}")
    assert isinstance(exc_info.value.__cause__, ConnectionResetError)


@pytest.mark.asyncio
async def test_run_demultiplexes_frames_by_serial() -> None:
    ws = _FakeWs(
        [
            _text(_report("FAN-A", {"poweron": True})),
            _text(_report("FAN-B", {"windlevel": 6})),
            aiohttp.WSMessage(
                aiohttp.WSMsgType.BINARY,
                json.dumps(_report("FAN-B", {"poweron": True})).encode(),
                None,
            ),
        ]
    )
    channel = WebSocketChannel(ws)  # type: ignore[arg-type]
    fan_a = _bridge(channel, "FAN-A")
    fan_b = _bridge(channel, "FAN-B")

    await channel.run()

    assert fan_a.get_power() is True
    assert fan_a.get_speed() == 17
    assert fan_b.get_power() is True
    assert fan_b.get_speed() == 100


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_break_delivery() -> None:
    ws = _FakeWs(
        [
            _text(_report("FAN-A", {"poweron": True})),
            _text(_report("FAN-A", {"windlevel": 3})),
        ]
    )
    channel = WebSocketChannel(ws)  # type: ignore[arg-type]

    def _broken(_text: str) -> None:
        raise RuntimeError("handler bug")

    channel.on_message(_broken)
    fan_a = _bridge(channel, "FAN-A")

    await channel.run()

    assert fan_a.get_power() is True
    assert fan_a.get_speed() == 50


@pytest.mark.asyncio
async def test_run_stops_on_error_frame() -> None:
    ws = _FakeWs(
        [
            aiohttp.WSMessage(aiohttp.WSMsgType.ERROR, None, None),
            _text(_report("FAN-A", {"poweron": True})),
        ]
    )
    channel = WebSocketChannel(ws)  # type: ignore[arg-type]
    fan_a = _bridge(channel, "FAN-A")

    await channel.run()

    assert fan_a.get_power() is False


def test_unsubscribe_is_safe_to_call_twice() -> None:
    channel = WebSocketChannel(_FakeWs())  # type: ignore[arg-type]
    received: list[str] = []

    unsubscribe = channel.on_message(received.append)
    channel.dispatch("one")
    unsubscribe()
    unsubscribe()
    channel.dispatch("two")

    assert received == ["one"]


@pytest.mark.asyncio
async def test_close_closes_socket() -> None:
    ws = _FakeWs()
    channel = WebSocketChannel(ws)  # type: ignore[arg-type]

    await channel.close()

    assert channel.closed is True
