"""GATT service abstraction over ``org.bluez.GattService1``."""

from __future__ import annotations

from typing import List

from bluebus.bt_ref.constants import GATT_SERVICE_INTERFACE
from bluebus.core.errors import NotImplementedFeatureError
from bluebus.dbuslayer import bus
from bluebus.dbuslayer.proxy import BluezObject

__all__ = ["Service"]


class Service(BluezObject):
    """Path-addressed handle on one remote GATT service."""

    INTERFACE = GATT_SERVICE_INTERFACE

    def get_uuid(self) -> str:
        return self._get_str("UUID")

    def is_primary(self) -> bool:
        return self._get_bool("Primary")

    def get_device(self) -> str:
        return self._get_path("Device")

    def get_gatt_characteristics(self) -> List[str]:
        return bus.list_characteristics(self._conn, self.object_path)

    def get_includes(self) -> List[str]:
        raise NotImplementedFeatureError("get_includes")
