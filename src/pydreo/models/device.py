"""Device descriptor, startup snapshot and cached state models."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from pydreo._constants import KEY_LEVEL, KEY_OSCILLATION, KEY_POWER, PERCENT_MAX, PERCENT_MIN
from pydreo.exceptions import DreoConfigError
from pydreo.ingestion.normalize import safe_bool, safe_int
from pydreo.models._base import DreoBaseModel


def _extract_max_level(device: Mapping[str, Any]) -> int:
    """Read the maximum fan level from the device's ``controlsConf``.

    The cloud listing stores it as the text of the second item of the
    second control (``controlsConf.control[1].items[1].text``).
    """
    try:
        text = device["controlsConf"]["control"][1]["items"][1]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise DreoConfigError("Device metadata is missing controlsConf max speed") from exc
    level = safe_int(text)
    if level is None or level <= 0:
        raise DreoConfigError(f"Invalid max speed in device metadata: {text!r}")
    return level


def _state_value(state: Mapping[str, Any], key: str) -> Any:
    """Unwrap ``{"key": {"state": value}}`` startup entries."""
    entry = state.get(key)
    if isinstance(entry, Mapping):
        return entry.get("state")
    return entry


class DeviceDescriptor(DreoBaseModel):
    """Immutable identity and capabilities of one fan."""

    serial: str = Field(validation_alias=AliasChoices("sn", "serial", "devicesn"))
    max_level: int = Field(gt=0)
    supports_oscillation: bool = False
    brand: str | None = None
    model: str | None = None
    device_name: str | None = None

    @field_validator("serial")
    @classmethod
    def _normalize_serial(cls, value: str) -> str:
        serial = value.strip()
        if not serial:
            raise ValueError("serial must be non-empty")
        return serial

    @classmethod
    def from_api(
        cls,
        device: Mapping[str, Any],
        state: Mapping[str, Any] | None = None,
        *,
        max_level: int | None = None,
    ) -> DeviceDescriptor:
        """Build a descriptor from a cloud device-listing entry.

        Oscillation support is declared when the startup *state* carries a
        ``shakehorizon`` entry.
        """
        resolved_max = max_level if max_level is not None else _extract_max_level(device)
        try:
            return cls.model_validate(
                {
                    **dict(device),
                    "max_level": resolved_max,
                    "supports_oscillation": state is not None and KEY_OSCILLATION in state,
                }
            )
        except ValueError as exc:
            raise DreoConfigError(f"Invalid device metadata: {exc}") from exc


class DeviceSnapshot(DreoBaseModel):
    """Device state as reported once at startup."""

    power: bool = False
    level: int | None = None
    oscillating: bool | None = None

    @classmethod
    def from_api(cls, state: Mapping[str, Any]) -> DeviceSnapshot:
        """Parse ``{"poweron": {"state": ...}, "windlevel": {"state": ...}, ...}``."""
        return cls(
            power=bool(safe_bool(_state_value(state, KEY_POWER))),
            level=safe_int(_state_value(state, KEY_LEVEL)),
            oscillating=safe_bool(_state_value(state, KEY_OSCILLATION)),
            raw=dict(state),
        )


class DeviceState(BaseModel):
    """Snapshot of the cached fan state as read by consumers."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    power: bool = False
    speed_percent: int = Field(default=0, ge=PERCENT_MIN, le=PERCENT_MAX)
    oscillating: bool = False
