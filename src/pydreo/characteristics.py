"""Consumer-facing characteristic handlers.

Maps a :class:`pydreo.bridge.FanBridge` onto HomeKit Fanv2
characteristics so an accessory framework only has to wire getters and
setters.  ``SwingMode`` is only present when the fan supports
oscillation.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pydreo.bridge import FanBridge
    from pydreo.models.device import DeviceDescriptor

_logger = logging.getLogger(__name__)

ACTIVE = "Active"
ROTATION_SPEED = "RotationSpeed"
SWING_MODE = "SwingMode"


@dataclass(frozen=True, slots=True)
class Characteristic:
    name: str
    getter: Callable[[], Any]
    setter: Callable[[Any], Awaitable[None]]


def build_characteristics(bridge: FanBridge) -> dict[str, Characteristic]:
    """Return the characteristic handlers exposed for *bridge*."""

    async def set_active(value: Any) -> None:
        _logger.debug("Triggered SET Active: %s", value)
        await bridge.set_power(bool(value))

    async def set_rotation_speed(value: Any) -> None:
        await bridge.set_speed(float(value))

    handlers = {
        ACTIVE: Characteristic(ACTIVE, bridge.get_power, set_active),
        ROTATION_SPEED: Characteristic(ROTATION_SPEED, bridge.get_speed, set_rotation_speed),
    }

    if bridge.supports_oscillation:

        async def set_swing_mode(value: Any) -> None:
            await bridge.set_oscillation(bool(value))

        handlers[SWING_MODE] = Characteristic(SWING_MODE, bridge.get_oscillation, set_swing_mode)

    return handlers


def accessory_information(descriptor: DeviceDescriptor) -> dict[str, str]:
    """AccessoryInformation values for the fan."""
    return {
        "Manufacturer": descriptor.brand or "Dreo",
        "Model": descriptor.model or "",
        "SerialNumber": descriptor.serial,
        "Name": descriptor.device_name or descriptor.serial,
    }
