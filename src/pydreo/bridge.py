"""State bridge between one Dreo fan and its consumer-facing characteristics."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from pydreo._bridge import commands as _commands
from pydreo.channel import MessageChannel, Unsubscribe
from pydreo.config import DreoConfig
from pydreo.exceptions import DreoUnsupportedError
from pydreo.ingestion.reports import handle_frame
from pydreo.models.device import DeviceDescriptor, DeviceSnapshot, DeviceState
from pydreo.state.events import StateUpdate
from pydreo.state.store import StateCache

_logger = logging.getLogger(__name__)


def _now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class FanBridge:
    """Keeps a fan's cached state in sync with the shared cloud channel.

    Getters read the cache and never touch the network.  Setters send a
    control frame and return without waiting for the device; confirmation
    arrives later through :meth:`handle_message`.

    Usage::

        bridge = FanBridge.from_api(device, state, channel)
        await bridge.set_speed(60)
        bridge.get_speed()
    """

    def __init__(
        self,
        descriptor: DeviceDescriptor,
        channel: MessageChannel,
        *,
        snapshot: DeviceSnapshot | None = None,
        config: DreoConfig | None = None,
        clock_ms: Callable[[], int] = _now_ms,
    ) -> None:
        self._descriptor = descriptor
        self._channel = channel
        self._config = config or DreoConfig()
        self._clock_ms = clock_ms
        self._cache = StateCache.from_snapshot(descriptor, snapshot or DeviceSnapshot())
        self._command_lock = asyncio.Lock()
        self._unsubscribe: Unsubscribe | None = None
        _logger.debug("State for %s: %s", descriptor.serial, self._cache.read())

    @classmethod
    def from_api(
        cls,
        device: Mapping[str, Any],
        state: Mapping[str, Any],
        channel: MessageChannel,
        *,
        config: DreoConfig | None = None,
    ) -> FanBridge:
        """Build and attach a bridge from the cloud device listing and startup state."""
        descriptor = DeviceDescriptor.from_api(device, state)
        bridge = cls(
            descriptor,
            channel,
            snapshot=DeviceSnapshot.from_api(state),
            config=config,
        )
        bridge.attach()
        return bridge

    # ------------------------------------------------------------------
    # Channel subscription
    # ------------------------------------------------------------------

    @property
    def is_attached(self) -> bool:
        return self._unsubscribe is not None

    def attach(self) -> None:
        """Register the inbound handler on the channel (once)."""
        if self._unsubscribe is not None:
            _logger.debug("Bridge for %s already attached", self.serial)
            return
        self._unsubscribe = self._channel.on_message(self.handle_message)

    def detach(self) -> None:
        unsubscribe = self._unsubscribe
        self._unsubscribe = None
        if unsubscribe is not None:
            unsubscribe()

    def handle_message(self, raw: str | bytes | Mapping[str, Any]) -> StateUpdate | None:
        """Apply one inbound frame.  Never raises."""
        try:
            return handle_frame(raw, descriptor=self._descriptor, store_apply=self._cache.apply)
        except Exception:
            _logger.debug("Inbound frame handling failed for %s", self.serial, exc_info=True)
            return None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def descriptor(self) -> DeviceDescriptor:
        return self._descriptor

    @property
    def serial(self) -> str:
        return self._descriptor.serial

    @property
    def supports_oscillation(self) -> bool:
        return self._descriptor.supports_oscillation

    @property
    def state(self) -> DeviceState:
        return self._cache.read()

    @property
    def cache(self) -> StateCache:
        return self._cache

    def _now_ms(self) -> int:
        return self._clock_ms()

    def get_power(self) -> bool:
        return self._cache.read().power

    def get_speed(self) -> int:
        return self._cache.read().speed_percent

    def get_oscillation(self) -> bool:
        if not self.supports_oscillation:
            raise DreoUnsupportedError(f"Device {self.serial} does not support oscillation")
        return self._cache.read().oscillating

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def set_power(self, on: bool) -> bool:
        return await _commands.set_power(self, on)

    async def set_speed(self, percent: float) -> bool:
        return await _commands.set_speed(self, percent)

    async def set_oscillation(self, on: bool) -> bool:
        return await _commands.set_oscillation(self, on)

    def diagnostics(self) -> dict[str, Any]:
        return {
            "descriptor": self._descriptor.model_dump(),
            "attached": self.is_attached,
            "quantize_speed": self._config.quantize_speed,
            "cache": self._cache.diagnostics(),
        }
