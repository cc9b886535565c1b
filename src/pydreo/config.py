"""Bridge configuration for pydreo."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pydreo._constants import WS_URL
from pydreo.exceptions import DreoConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class DreoConfig:
    """Bridge configuration.

    Parameters
    ----------
    ws_url : str
        Dreo cloud WebSocket endpoint.  Only used by helpers that open the
        socket themselves; bridges receive an already-open channel.
    access_token : str or None
        Cloud access token appended to ``ws_url`` as ``accessToken``.
    ws_heartbeat : float
        WebSocket ping interval in seconds.
    send_timeout : float
        Seconds a single outbound frame may take before the send is
        reported as failed.  ``0`` disables the timeout.
    quantize_speed : bool
        Snap computed speed levels into the fixed 20-wide bands before
        sending.  Enabled by default to keep the slider stable.
    trace_frames : bool
        Log every raw inbound/outbound frame at DEBUG level (redacted).
    """

    ws_url: str = WS_URL
    access_token: str | None = None
    ws_heartbeat: float = 30.0
    send_timeout: float = 10.0
    quantize_speed: bool = True
    trace_frames: bool = False

    def __post_init__(self) -> None:
        if self.send_timeout < 0:
            raise DreoConfigError(f"send_timeout must be >= 0, got {self.send_timeout}")
        if self.ws_heartbeat <= 0:
            raise DreoConfigError(f"ws_heartbeat must be > 0, got {self.ws_heartbeat}")

    @classmethod
    def from_env(cls, **overrides: Any) -> DreoConfig:
        """Create configuration from ``DREO_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        _ENV_CONFIG_MAP = {
            "DREO_WS_URL": "ws_url",
            "DREO_ACCESS_TOKEN": "access_token",
        }
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        try:
            heartbeat_env = env.get("DREO_WS_HEARTBEAT")
            if heartbeat_env is not None and "ws_heartbeat" not in overrides:
                config_kwargs["ws_heartbeat"] = float(heartbeat_env)

            timeout_env = env.get("DREO_SEND_TIMEOUT")
            if timeout_env is not None and "send_timeout" not in overrides:
                config_kwargs["send_timeout"] = float(timeout_env)
        except ValueError as exc:
            raise DreoConfigError(f"Invalid numeric DREO_* setting: {exc}") from exc

        if "quantize_speed" not in overrides:
            config_kwargs["quantize_speed"] = _env_bool(env.get("DREO_QUANTIZE_SPEED"), True)

        if "trace_frames" not in overrides:
            config_kwargs["trace_frames"] = _env_bool(env.get("DREO_TRACE_FRAMES"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

    def socket_url(self) -> str:
        """Return ``ws_url`` with the access token attached."""
        if not self.access_token:
            raise DreoConfigError("access_token is required to open the Dreo WebSocket")
        separator = "&" if "?" in self.ws_url else "?"
        return f"{self.ws_url}{separator}accessToken={self.access_token}"
