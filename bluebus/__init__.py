"""
bluebus - typed proxies over the BlueZ D-Bus API
"""

__version__ = "0.3.0"

# ---------------------------------------------------------------------------
# Initialise logging on *package import* so the per-category log files are
# configured before any proxy talks to the bus.
# ---------------------------------------------------------------------------
import importlib as _importlib

_importlib.import_module("bluebus.core.log")  # noqa: F401 – side-effect import

from bluebus.core.errors import (  # noqa: E402
    BluebusError,
    BusError,
    AdapterNotFoundError,
    NoDeviceFoundError,
    DeprecatedFeatureError,
    NotImplementedFeatureError,
    FailedToGetStatusError,
    UnknownError,
)
from bluebus.dbuslayer import (  # noqa: E402
    Session,
    Adapter,
    DiscoverySession,
    Device,
    Service,
    Characteristic,
    Descriptor,
    ObexSession,
    ObexTransfer,
    SessionTarget,
    TransferState,
)

__all__ = [
    "BluebusError",
    "BusError",
    "AdapterNotFoundError",
    "NoDeviceFoundError",
    "DeprecatedFeatureError",
    "NotImplementedFeatureError",
    "FailedToGetStatusError",
    "UnknownError",
    "Session",
    "Adapter",
    "DiscoverySession",
    "Device",
    "Service",
    "Characteristic",
    "Descriptor",
    "ObexSession",
    "ObexTransfer",
    "SessionTarget",
    "TransferState",
]
