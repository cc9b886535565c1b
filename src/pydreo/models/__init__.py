"""Pydantic models for Dreo cloud payloads and cached state."""

from pydreo.models.device import DeviceDescriptor, DeviceSnapshot, DeviceState
from pydreo.models.messages import ControlMessage, ControlParams, ReportMessage

__all__ = [
    "ControlMessage",
    "ControlParams",
    "DeviceDescriptor",
    "DeviceSnapshot",
    "DeviceState",
    "ReportMessage",
]
