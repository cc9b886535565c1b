"""Wire models for frames exchanged on the Dreo WebSocket.

Outbound::

    {"devicesn": "...", "method": "control", "params": {...}, "timestamp": 1700000000000}

Inbound::

    {"devicesn": "...", "method": "report", "reported": {"poweron": true}}
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from pydreo._constants import KEY_LEVEL, KEY_OSCILLATION, KEY_POWER, METHOD_CONTROL, METHOD_REPORT
from pydreo.models._base import DreoBaseModel


class ControlParams(BaseModel):
    """Partial update carried in a control frame.

    ``level`` is bounded below by 1: level 0 is not a legal device value
    and can never be put on the wire.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    power: bool | None = Field(default=None, alias=KEY_POWER)
    level: int | None = Field(default=None, alias=KEY_LEVEL, ge=1)
    oscillation: bool | None = Field(default=None, alias=KEY_OSCILLATION)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ControlMessage(BaseModel):
    """Outbound control frame.  Built per request, never retained."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    serial: str = Field(alias="devicesn", min_length=1)
    method: Literal["control"] = METHOD_CONTROL
    params: ControlParams
    timestamp: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "devicesn": self.serial,
            "method": self.method,
            "params": self.params.to_wire(),
            "timestamp": self.timestamp,
        }

    def to_wire(self) -> str:
        """Compact JSON text ready for ``channel.send``."""
        return json.dumps(self.to_payload(), separators=(",", ":"))


class ReportMessage(DreoBaseModel):
    """Inbound report/ack frame for one device."""

    serial: str = Field(alias="devicesn")
    method: str
    reported: dict[str, Any] = Field(default_factory=dict)

    @property
    def key(self) -> str | None:
        """First reported key.  The device sends single-key deltas."""
        return next(iter(self.reported), None)

    @property
    def value(self) -> Any:
        key = self.key
        return None if key is None else self.reported[key]

    @property
    def is_unsolicited(self) -> bool:
        return self.method == METHOD_REPORT
