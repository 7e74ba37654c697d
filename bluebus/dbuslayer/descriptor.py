"""GATT Descriptor wrapper (``org.bluez.GattDescriptor1``)."""

from __future__ import annotations

from typing import Iterable, List, Optional

from bluebus.bt_ref.constants import DEFAULT_TIMEOUT_MS, GATT_DESCRIPTOR_INTERFACE
from bluebus.core.log import get_logger
from bluebus.dbuslayer import bus
from bluebus.dbuslayer.characteristic import marshal_bytes
from bluebus.dbuslayer.proxy import BluezObject

logger = get_logger(__name__)

__all__ = ["Descriptor"]


class Descriptor(BluezObject):
    INTERFACE = GATT_DESCRIPTOR_INTERFACE

    def get_uuid(self) -> str:
        return self._get_str("UUID")

    def get_characteristic(self) -> str:
        return self._get_path("Characteristic")

    def get_value(self) -> bytes:
        return self._get_bytes("Value")

    def get_flags(self) -> List[str]:
        return self._get_str_list("Flags")

    def read_value(self, offset: Optional[int] = None) -> bytes:
        reply = self.call_method(
            "ReadValue",
            (bus.gatt_value_options(offset),),
            DEFAULT_TIMEOUT_MS,
            signature="a{sv}",
        )
        value = bus.to_bytes(reply, self._what("ReadValue"))
        logger.debug(f"Read {len(value)} bytes from descriptor {self.object_path}")
        return value

    def write_value(self, values: Iterable[int], offset: Optional[int] = None) -> None:
        payload = marshal_bytes(values)
        self.call_method(
            "WriteValue",
            (payload, bus.gatt_value_options(offset)),
            DEFAULT_TIMEOUT_MS,
            signature="aya{sv}",
        )
