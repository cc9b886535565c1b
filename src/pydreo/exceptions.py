"""Custom exception hierarchy for pydreo."""

from __future__ import annotations


class DreoError(Exception):
    """Base exception for all pydreo errors."""


class DreoConfigError(DreoError):
    """Invalid or missing configuration / device metadata."""


class DreoChannelError(DreoError):
    """Sending on the message channel failed (closed, reset, timed out)."""

    def __init__(self, message: str, *, serial: str = "") -> None:
        self.serial = serial
        super().__init__(message)


class DreoProtocolError(DreoError):
    """An inbound frame could not be parsed.

    Raised by the frame parser only.  The inbound handler catches it and
    drops the frame so that delivery of later frames is unaffected.
    """

    def __init__(self, message: str, *, frame: str = "") -> None:
        self.frame = frame
        super().__init__(message)


class DreoUnsupportedError(DreoError):
    """Operation is not available on this device (e.g. oscillation)."""
