"""Internal constants and speed scaling shared across the library."""

from __future__ import annotations

import math

WS_URL = "wss://wsb-us.dreo-cloud.com/websocket"

# ------------------------------------------------------------------
# Wire protocol
# ------------------------------------------------------------------

METHOD_CONTROL = "control"
METHOD_REPORT = "report"
METHOD_CONTROL_REPORT = "control-report"
METHOD_CONTROL_REPLY = "control-reply"

REPORT_METHODS: frozenset[str] = frozenset({METHOD_REPORT, METHOD_CONTROL_REPORT, METHOD_CONTROL_REPLY})

KEY_POWER = "poweron"
KEY_LEVEL = "windlevel"
KEY_OSCILLATION = "shakehorizon"

# ------------------------------------------------------------------
# Percent <-> device level scale
# ------------------------------------------------------------------

PERCENT_MIN = 0
PERCENT_MAX = 100

# (lower exclusive, upper inclusive, target).  Applied to the computed
# level number, not to a percent.  Anything outside every band passes through.
SPEED_QUANTIZATION_BUCKETS: tuple[tuple[int, int, int], ...] = (
    (10, 30, 20),
    (30, 50, 40),
    (50, 70, 60),
    (70, 90, 80),
    (90, 100, 100),
)


def clamp_percent(value: float) -> int:
    """Round *value* to an integer percent in ``[0, 100]``."""
    return max(PERCENT_MIN, min(PERCENT_MAX, int(round(float(value)))))


def percent_to_level(percent: int, max_level: int) -> int:
    """Convert a percent to a device level: ``ceil(percent * max_level / 100)``.

    Result lies in ``[0, max_level]`` for percents in ``[0, 100]``.
    """
    return math.ceil(percent * max_level / 100)


def level_to_percent(level: int, max_level: int) -> int:
    """Convert a device level to a clamped percent: ``ceil(level * 100 / max_level)``."""
    if max_level <= 0:
        raise ValueError(f"max_level must be positive, got {max_level}")
    return max(PERCENT_MIN, min(PERCENT_MAX, math.ceil(level * 100 / max_level)))


def quantize_level(level: int) -> int:
    """Snap a computed level into :data:`SPEED_QUANTIZATION_BUCKETS`.

    Idempotent: 20, 40, 60, 80 and 100 map to themselves.
    """
    for lower, upper, target in SPEED_QUANTIZATION_BUCKETS:
        if lower < level <= upper:
            return target
    return level
