"""Normalized state updates.

Both traffic directions (optimistic writes from outbound commands and
inbound reports) are expressed as :class:`StateUpdate`.  Only the
state cache is allowed to merge them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from pydreo._constants import METHOD_CONTROL_REPLY, METHOD_CONTROL_REPORT, METHOD_REPORT


class StateField(StrEnum):
    """Cached fields.  Values match :class:`pydreo.models.device.DeviceState` attributes."""

    POWER = "power"
    SPEED = "speed_percent"
    OSCILLATION = "oscillating"


class UpdateSource(StrEnum):
    SNAPSHOT = "snapshot"
    OPTIMISTIC = "optimistic"
    REPORT = METHOD_REPORT
    CONTROL_REPORT = METHOD_CONTROL_REPORT
    CONTROL_REPLY = METHOD_CONTROL_REPLY

    @classmethod
    def from_method(cls, method: str) -> UpdateSource:
        """Map an inbound frame ``method`` to its source."""
        return cls(method)


class StateUpdate(BaseModel):
    """A single-field update to apply to the state cache."""

    model_config = ConfigDict(frozen=True)

    field: StateField
    value: bool | int
    source: UpdateSource
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
