"""
Adapter D-Bus Interface
Typed proxy over ``org.bluez.Adapter1``.
"""

from __future__ import annotations

from typing import List

import dbus

from bluebus.ble_ops.modalias import Modalias, parse_modalias
from bluebus.bt_ref.constants import (
    ADAPTER_INTERFACE,
    DEFAULT_TIMEOUT_MS,
    POWERED_TIMEOUT_MS,
)
from bluebus.bt_ref.utils import device_address_to_path
from bluebus.core.errors import AdapterNotFoundError, DeprecatedFeatureError, NoDeviceFoundError
from bluebus.core.log import get_logger
from bluebus.dbuslayer import bus
from bluebus.dbuslayer.device import Device
from bluebus.dbuslayer.proxy import BluezObject

logger = get_logger(__name__)

DISCOVERY_SESSION_FEATURE = "Discovery Session"


class Adapter(BluezObject):
    """Core adapter class for Bluetooth operations."""

    INTERFACE = ADAPTER_INTERFACE

    @classmethod
    def init(cls, session) -> "Adapter":
        """Return the first adapter the daemon enumerates."""
        adapters = bus.list_adapters(session.get_connection())
        if not adapters:
            raise AdapterNotFoundError()
        logger.debug(f"Using adapter {adapters[0]} ({len(adapters)} available)")
        return cls(session, adapters[0])

    @classmethod
    def open(cls, session, object_path: str) -> "Adapter":
        """Return the adapter at *object_path* after checking it exists."""
        if str(object_path) not in bus.list_adapters(session.get_connection()):
            raise AdapterNotFoundError(str(object_path))
        return cls(session, object_path)

    # ------------------------------------------------------------------
    # Devices
    # ------------------------------------------------------------------
    def get_device_list(self) -> List[str]:
        return bus.list_devices(self._conn, self.object_path)

    def get_first_device(self) -> Device:
        devices = self.get_device_list()
        if not devices:
            raise NoDeviceFoundError(self.object_path)
        return Device(self.session, devices[0])

    def get_device(self, address: str) -> Device:
        """Device proxy for *address*, which must already be known to BlueZ."""
        path = device_address_to_path(address, self.object_path)
        if path not in self.get_device_list():
            raise NoDeviceFoundError(self.object_path)
        return Device(self.session, path)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    def get_address(self) -> str:
        return self._get_str("Address")

    def get_address_type(self) -> str:
        return self._get_str("AddressType")

    def get_name(self) -> str:
        return self._get_str("Name")

    def get_alias(self) -> str:
        return self._get_str("Alias")

    def set_alias(self, value: str) -> None:
        self.set_property("Alias", dbus.String(value), DEFAULT_TIMEOUT_MS)

    def get_class(self) -> int:
        return self._get_int("Class", "u32")

    def is_powered(self) -> bool:
        return self._get_bool("Powered")

    def set_powered(self, value: bool) -> None:
        # Powering the controller can take seconds; BlueZ replies when done
        self.set_property("Powered", dbus.Boolean(value), POWERED_TIMEOUT_MS)

    def is_discoverable(self) -> bool:
        return self._get_bool("Discoverable")

    def set_discoverable(self, value: bool) -> None:
        self.set_property("Discoverable", dbus.Boolean(value), DEFAULT_TIMEOUT_MS)

    def get_discoverable_timeout(self) -> int:
        return self._get_int("DiscoverableTimeout", "u32")

    def set_discoverable_timeout(self, value: int) -> None:
        self.set_property("DiscoverableTimeout", dbus.UInt32(value), DEFAULT_TIMEOUT_MS)

    def is_pairable(self) -> bool:
        return self._get_bool("Pairable")

    def set_pairable(self, value: bool) -> None:
        self.set_property("Pairable", dbus.Boolean(value), DEFAULT_TIMEOUT_MS)

    def get_pairable_timeout(self) -> int:
        return self._get_int("PairableTimeout", "u32")

    def set_pairable_timeout(self, value: int) -> None:
        self.set_property("PairableTimeout", dbus.UInt32(value), DEFAULT_TIMEOUT_MS)

    def is_discovering(self) -> bool:
        return self._get_bool("Discovering")

    def get_uuids(self) -> List[str]:
        return self._get_str_list("UUIDs")

    def get_modalias(self) -> Modalias:
        return parse_modalias(self._get_str("Modalias"))

    def get_vendor_id_source(self) -> str:
        return self.get_modalias().source

    def get_vendor_id(self) -> int:
        return self.get_modalias().vendor

    def get_product_id(self) -> int:
        return self.get_modalias().product

    def get_device_id(self) -> int:
        return self.get_modalias().device

    # ------------------------------------------------------------------
    # Methods
    # ------------------------------------------------------------------
    def start_discovery(self):
        """Always fails; discovery is scoped through :class:`DiscoverySession`."""
        raise DeprecatedFeatureError(DISCOVERY_SESSION_FEATURE)

    def stop_discovery(self):
        """Always fails; discovery is scoped through :class:`DiscoverySession`."""
        raise DeprecatedFeatureError(DISCOVERY_SESSION_FEATURE)

    def get_discovery_filters(self) -> List[str]:
        """Filter keys this adapter accepts in ``SetDiscoveryFilter``."""
        reply = self.call_method("GetDiscoveryFilters", timeout_ms=DEFAULT_TIMEOUT_MS)
        return bus.to_str_list(reply, self._what("GetDiscoveryFilters"))

    def remove_device(self, device_path: str) -> None:
        logger.debug(f"RemoveDevice {device_path} on {self.object_path}")
        self.call_method(
            "RemoveDevice",
            (dbus.ObjectPath(device_path),),
            DEFAULT_TIMEOUT_MS,
            signature="o",
        )


__all__ = ["Adapter", "DISCOVERY_SESSION_FEATURE"]
