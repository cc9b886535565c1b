"""Inbound frame ingestion.

Translates raw WebSocket frames into :class:`pydreo.state.events.StateUpdate`
objects for one device.  Frames for other devices, non-report methods and
unknown keys are dropped; malformed frames raise
:class:`pydreo.exceptions.DreoProtocolError` from the parsing helpers and
are dropped by :func:`handle_frame`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from pydreo._constants import KEY_LEVEL, KEY_OSCILLATION, KEY_POWER, REPORT_METHODS, level_to_percent
from pydreo._redact import redact_for_log
from pydreo.exceptions import DreoProtocolError
from pydreo.ingestion.normalize import safe_bool, safe_int
from pydreo.models.device import DeviceDescriptor
from pydreo.models.messages import ReportMessage
from pydreo.state.events import StateField, StateUpdate, UpdateSource

_logger = logging.getLogger(__name__)


def decode_frame(raw: str | bytes | Mapping[str, Any]) -> dict[str, Any]:
    """Decode a frame into a JSON object."""
    if isinstance(raw, Mapping):
        return dict(raw)
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    try:
        payload = json.loads(text)
    except (TypeError, json.JSONDecodeError) as exc:
        raise DreoProtocolError(f"Frame is not JSON: {exc}", frame=str(text)[:200]) from exc
    if not isinstance(payload, dict):
        raise DreoProtocolError("Frame is not a JSON object", frame=str(text)[:200])
    return payload


def parse_report(payload: Mapping[str, Any]) -> ReportMessage:
    """Validate a decoded frame as a report message."""
    try:
        return ReportMessage.model_validate(dict(payload))
    except ValidationError as exc:
        raise DreoProtocolError(f"Malformed report frame: {exc.error_count()} error(s)") from exc


def build_update(report: ReportMessage, descriptor: DeviceDescriptor) -> StateUpdate | None:
    """Translate the single reported key into a state update.

    Whether the update is allowed to write the cache (e.g. level acks) is
    decided by the state cache's write policy, not here.
    """
    key = report.key
    if key is None:
        raise DreoProtocolError("Report frame carries no reported key")

    source = UpdateSource.from_method(report.method)
    value = report.value

    if key == KEY_POWER:
        power = safe_bool(value)
        if power is None:
            raise DreoProtocolError(f"Invalid {KEY_POWER} value: {value!r}")
        return StateUpdate(field=StateField.POWER, value=power, source=source)

    if key == KEY_LEVEL:
        level = safe_int(value)
        if level is None:
            raise DreoProtocolError(f"Invalid {KEY_LEVEL} value: {value!r}")
        return StateUpdate(
            field=StateField.SPEED,
            value=level_to_percent(level, descriptor.max_level),
            source=source,
        )

    if key == KEY_OSCILLATION:
        if not descriptor.supports_oscillation:
            _logger.debug("Ignoring %s for %s: oscillation not supported", key, descriptor.serial)
            return None
        oscillating = safe_bool(value)
        if oscillating is None:
            raise DreoProtocolError(f"Invalid {KEY_OSCILLATION} value: {value!r}")
        return StateUpdate(field=StateField.OSCILLATION, value=oscillating, source=source)

    _logger.debug("Unknown command received: %s", key)
    return None


def handle_frame(
    raw: str | bytes | Mapping[str, Any],
    *,
    descriptor: DeviceDescriptor,
    store_apply: Callable[[StateUpdate], bool],
) -> StateUpdate | None:
    """Apply one inbound frame to a device's cache.

    Returns the update when the cache was written, otherwise ``None``.
    Never raises for malformed input.
    """
    try:
        payload = decode_frame(raw)
    except DreoProtocolError as exc:
        _logger.debug("Dropping undecodable frame: %s", exc)
        return None

    # Several devices share one socket.
    if payload.get("devicesn") != descriptor.serial:
        return None

    method = payload.get("method")
    if method not in REPORT_METHODS:
        return None

    _logger.debug("Incoming %s", redact_for_log(payload))

    try:
        update = build_update(parse_report(payload), descriptor)
    except DreoProtocolError as exc:
        _logger.debug("Dropping frame for %s: %s", descriptor.serial, exc)
        return None

    if update is None:
        return None
    return update if store_apply(update) else None
