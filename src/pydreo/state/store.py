"""In-memory state cache for one fan.

This is the only component allowed to merge state updates.  Reads never
perform I/O and never block on the network.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydreo._constants import clamp_percent, level_to_percent
from pydreo.models.device import DeviceDescriptor, DeviceSnapshot, DeviceState
from pydreo.state.events import StateField, StateUpdate, UpdateSource
from pydreo.state.policy import should_accept_update, write_policy

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _coerce(field: StateField, value: bool | int) -> bool | int:
    if field == StateField.SPEED:
        return clamp_percent(value)
    return bool(value)


class StateCache:
    """Last-known state of a single fan.

    Each field is an independent register: any accepted update moves it
    directly to the new value, last write wins.  Writers are serialized by
    a lock; :meth:`read` returns an immutable snapshot.
    """

    def __init__(
        self,
        initial: DeviceState | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._state = initial if initial is not None else DeviceState()
        self._last_updates: dict[StateField, tuple[UpdateSource, datetime]] = {}

    @classmethod
    def from_snapshot(
        cls,
        descriptor: DeviceDescriptor,
        snapshot: DeviceSnapshot,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> StateCache:
        """Seed the cache from the startup snapshot.

        A missing level seeds the lowest legal level so that the cached
        percent always maps back to a level in ``[1, max_level]``.
        """
        level = snapshot.level if snapshot.level is not None and snapshot.level > 0 else 1
        initial = DeviceState(
            power=snapshot.power,
            speed_percent=level_to_percent(level, descriptor.max_level),
            oscillating=bool(snapshot.oscillating) if descriptor.supports_oscillation else False,
        )
        cache = cls(initial, clock=clock)
        now = clock()
        for field in StateField:
            cache._last_updates[field] = (UpdateSource.SNAPSHOT, now)
        return cache

    def read(self) -> DeviceState:
        """Return the current state snapshot."""
        return self._state

    def apply(self, update: StateUpdate) -> bool:
        """Apply *update* if the field's write policy accepts its source.

        Returns ``True`` when the cache was written.
        """
        if not should_accept_update(update.field, update.source):
            _logger.debug(
                "Ignoring %s update of %s (%s policy)",
                update.source,
                update.field,
                write_policy(update.field),
            )
            return False

        value = _coerce(update.field, update.value)
        with self._lock:
            self._state = self._state.model_copy(update={update.field.value: value})
            self._last_updates[update.field] = (update.source, update.observed_at)
        return True

    def apply_value(self, field: StateField, value: bool | int, source: UpdateSource) -> bool:
        """Shorthand for :meth:`apply` with a freshly built update."""
        return self.apply(StateUpdate(field=field, value=value, source=source, observed_at=self._clock()))

    def last_update(self, field: StateField) -> tuple[UpdateSource, datetime] | None:
        return self._last_updates.get(field)

    def diagnostics(self) -> dict[str, Any]:
        state = self._state
        return {
            "state": state.model_dump(),
            "last_updates": {
                field.value: {"source": source.value, "observed_at": observed.isoformat()}
                for field, (source, observed) in self._last_updates.items()
            },
        }
