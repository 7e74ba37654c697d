"""
D-Bus layer for bluebus.
Typed proxies over the BlueZ (``org.bluez``) and obexd (``org.bluez.obex``) objects.
"""

from .session import Session
from .adapter import Adapter
from .discovery import DiscoverySession
from .device import Device
from .service import Service
from .characteristic import Characteristic
from .descriptor import Descriptor
from .obex import ObexSession, ObexTransfer, SessionTarget, TransferState

__all__ = [
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
