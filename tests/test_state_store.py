from __future__ import annotations

from datetime import UTC, datetime

import pytest

from pydreo.models.device import DeviceDescriptor, DeviceSnapshot, DeviceState
from pydreo.state.events import StateField, StateUpdate, UpdateSource
from pydreo.state.policy import WritePolicy, should_accept_update, write_policy
from pydreo.state.store import StateCache


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def _descriptor(*, oscillation: bool = True) -> DeviceDescriptor:
    return DeviceDescriptor(serial="SN123", max_level=6, supports_oscillation=oscillation)


def test_policies_are_write_through_for_speed_only() -> None:
    assert write_policy(StateField.SPEED) == WritePolicy.WRITE_THROUGH
    assert write_policy(StateField.POWER) == WritePolicy.WAIT_FOR_ECHO
    assert write_policy(StateField.OSCILLATION) == WritePolicy.WAIT_FOR_ECHO


@pytest.mark.parametrize(
    ("field", "source", "accepted"),
    [
        (StateField.SPEED, UpdateSource.OPTIMISTIC, True),
        (StateField.SPEED, UpdateSource.REPORT, True),
        (StateField.SPEED, UpdateSource.CONTROL_REPORT, False),
        (StateField.SPEED, UpdateSource.CONTROL_REPLY, False),
        (StateField.POWER, UpdateSource.OPTIMISTIC, False),
        (StateField.POWER, UpdateSource.REPORT, True),
        (StateField.POWER, UpdateSource.CONTROL_REPLY, True),
        (StateField.OSCILLATION, UpdateSource.CONTROL_REPORT, True),
        (StateField.OSCILLATION, UpdateSource.SNAPSHOT, True),
    ],
)
def test_should_accept_update(field: StateField, source: UpdateSource, accepted: bool) -> None:
    assert should_accept_update(field, source) is accepted


def test_seed_from_snapshot() -> None:
    cache = StateCache.from_snapshot(
        _descriptor(),
        DeviceSnapshot(power=True, level=3, oscillating=True),
        clock=_dt,
    )

    assert cache.read() == DeviceState(power=True, speed_percent=50, oscillating=True)
    assert cache.last_update(StateField.POWER) == (UpdateSource.SNAPSHOT, _dt())


def test_seed_without_level_uses_lowest_legal_level() -> None:
    cache = StateCache.from_snapshot(_descriptor(), DeviceSnapshot())
    assert cache.read().speed_percent == 17


def test_seed_ignores_oscillation_when_unsupported() -> None:
    cache = StateCache.from_snapshot(
        _descriptor(oscillation=False),
        DeviceSnapshot(power=False, level=1, oscillating=True),
    )
    assert cache.read().oscillating is False


def test_apply_overwrites_single_field_only() -> None:
    cache = StateCache(DeviceState(power=True, speed_percent=40, oscillating=True))

    applied = cache.apply(
        StateUpdate(field=StateField.POWER, value=False, source=UpdateSource.REPORT, observed_at=_dt())
    )

    assert applied is True
    assert cache.read() == DeviceState(power=False, speed_percent=40, oscillating=True)
    assert cache.last_update(StateField.POWER) == (UpdateSource.REPORT, _dt())
    assert cache.last_update(StateField.SPEED) is None


def test_apply_rejects_optimistic_power() -> None:
    cache = StateCache(DeviceState(power=False))

    assert cache.apply_value(StateField.POWER, True, UpdateSource.OPTIMISTIC) is False
    assert cache.read().power is False


def test_apply_clamps_speed() -> None:
    cache = StateCache()

    cache.apply_value(StateField.SPEED, 250, UpdateSource.OPTIMISTIC)

    assert cache.read().speed_percent == 100


def test_read_returns_immutable_snapshot() -> None:
    cache = StateCache(DeviceState(speed_percent=10))
    before = cache.read()

    cache.apply_value(StateField.SPEED, 90, UpdateSource.REPORT)

    assert before.speed_percent == 10
    assert cache.read().speed_percent == 90


def test_diagnostics_shape() -> None:
    cache = StateCache.from_snapshot(_descriptor(), DeviceSnapshot(power=True, level=6), clock=_dt)

    diag = cache.diagnostics()

    assert diag["state"] == {"power": True, "speed_percent": 100, "oscillating": False}
    assert diag["last_updates"]["power"]["source"] == "snapshot"
