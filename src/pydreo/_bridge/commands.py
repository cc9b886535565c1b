"""Outbound command operations for :class:`pydreo.bridge.FanBridge`.

These functions keep `bridge.py` small without changing the public API.
Each one reads the cache, decides, sends and writes under the bridge's
command lock so that concurrent requests cannot interleave.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from pydreo._constants import clamp_percent, percent_to_level, quantize_level
from pydreo._redact import redact_for_log
from pydreo.exceptions import DreoChannelError, DreoUnsupportedError
from pydreo.models.messages import ControlMessage, ControlParams
from pydreo.state.events import StateField, UpdateSource

if TYPE_CHECKING:
    from pydreo.bridge import FanBridge

_logger = logging.getLogger(__name__)


async def _send_control(bridge: FanBridge, params: ControlParams) -> None:
    message = ControlMessage(serial=bridge.serial, params=params, timestamp=bridge._now_ms())
    text = message.to_wire()
    _logger.debug("Sending %s", redact_for_log(message.to_payload()))

    timeout = bridge._config.send_timeout
    try:
        if timeout > 0:
            await asyncio.wait_for(bridge._channel.send(text), timeout)
        else:
            await bridge._channel.send(text)
    except DreoChannelError as exc:
        exc.serial = exc.serial or bridge.serial
        raise
    except TimeoutError as exc:
        raise DreoChannelError(f"Send timed out after {timeout}s", serial=bridge.serial) from exc
    except ConnectionError as exc:
        raise DreoChannelError(f"Send failed: {exc}", serial=bridge.serial) from exc


async def set_power(bridge: FanBridge, on: bool) -> bool:
    """Turn the fan on/off.  Returns ``True`` if a frame was sent.

    The cache is not touched: power is only written by device reports.
    """
    on = bool(on)
    async with bridge._command_lock:
        if bridge.state.power == on:
            _logger.debug("Power already %s for %s; not sending", on, bridge.serial)
            return False
        await _send_control(bridge, ControlParams(power=on))
    return True


def target_level(bridge: FanBridge, percent: int) -> int:
    """Level a percent request resolves to, after optional quantization."""
    level = percent_to_level(percent, bridge.descriptor.max_level)
    if bridge._config.quantize_speed:
        level = quantize_level(level)
    return level


async def set_speed(bridge: FanBridge, percent: float) -> bool:
    """Set the fan speed from a percent.  Returns ``True`` if a frame was sent.

    The requested percent is cached whether or not a frame was needed, but
    not when the send itself failed.
    """
    requested = clamp_percent(percent)
    async with bridge._command_lock:
        current = percent_to_level(bridge.state.speed_percent, bridge.descriptor.max_level)
        converted = target_level(bridge, requested)

        sent = False
        if converted == current:
            _logger.debug("Speed level %s unchanged for %s; not sending", converted, bridge.serial)
        elif converted == 0:
            # Level 0 is illegal on the device.
            _logger.debug("Speed %s%% maps to level 0 for %s; not sending", requested, bridge.serial)
        else:
            _logger.debug("Setting fan speed: %s", converted)
            # Sending power alongside the level keeps the device from
            # dropping the speed change while off.
            await _send_control(bridge, ControlParams(power=True, level=converted))
            sent = True

        bridge._cache.apply_value(StateField.SPEED, requested, UpdateSource.OPTIMISTIC)
    return sent


async def set_oscillation(bridge: FanBridge, on: bool) -> bool:
    """Toggle horizontal oscillation.  Returns ``True`` if a frame was sent."""
    if not bridge.supports_oscillation:
        raise DreoUnsupportedError(f"Device {bridge.serial} does not support oscillation")
    on = bool(on)
    async with bridge._command_lock:
        if bridge.state.oscillating == on:
            _logger.debug("Oscillation already %s for %s; not sending", on, bridge.serial)
            return False
        await _send_control(bridge, ControlParams(oscillation=on))
    return True
