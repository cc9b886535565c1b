"""pydreo - Async state bridge between Dreo fans and HomeKit-style characteristics."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pydreo")
except PackageNotFoundError:
    __version__ = "0+local"
from pydreo.bridge import FanBridge
from pydreo.channel import MessageChannel, WebSocketChannel
from pydreo.characteristics import Characteristic, accessory_information, build_characteristics
from pydreo.config import DreoConfig
from pydreo.exceptions import (
    DreoChannelError,
    DreoConfigError,
    DreoError,
    DreoProtocolError,
    DreoUnsupportedError,
)
from pydreo.models import (
    ControlMessage,
    ControlParams,
    DeviceDescriptor,
    DeviceSnapshot,
    DeviceState,
    ReportMessage,
)

__all__ = [
    "__version__",
    "Characteristic",
    "ControlMessage",
    "ControlParams",
    "DeviceDescriptor",
    "DeviceSnapshot",
    "DeviceState",
    "DreoChannelError",
    "DreoConfig",
    "DreoConfigError",
    "DreoError",
    "DreoProtocolError",
    "DreoUnsupportedError",
    "FanBridge",
    "MessageChannel",
    "ReportMessage",
    "WebSocketChannel",
    "accessory_information",
    "build_characteristics",
]
