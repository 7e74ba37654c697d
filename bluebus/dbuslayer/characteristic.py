"""Abstraction of a GATT Characteristic as exposed by BlueZ.

Values travel as ``bytes``.  ``read_value``/``write_value`` take an optional
``offset`` which is marshalled as a ``u16`` under the ``"offset"`` option key.

``acquire_notify``/``acquire_write`` hand the caller a raw file descriptor
together with the negotiated MTU.  The descriptor is owned by the caller from
then on and must be closed with :func:`os.close` when done.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

import dbus
import dbus.types

from bluebus.bt_ref.constants import (
    DEFAULT_TIMEOUT_MS,
    GATT_CHARACTERISTIC_INTERFACE,
    GATT_WRITE_TIMEOUT_MS,
)
from bluebus.core.errors import PropertyTypeError
from bluebus.core.log import get_logger
from bluebus.dbuslayer import bus
from bluebus.dbuslayer.proxy import BluezObject

logger = get_logger(__name__)

__all__ = ["Characteristic", "marshal_bytes"]


def marshal_bytes(values: Iterable[int]) -> dbus.Array:
    """Wrap *values* as an ``ay`` argument."""
    return dbus.Array([dbus.Byte(b) for b in bytes(values)], signature="y")


class Characteristic(BluezObject):
    """Lightweight wrapper around the BlueZ *GattCharacteristic1* interface."""

    INTERFACE = GATT_CHARACTERISTIC_INTERFACE

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    def get_uuid(self) -> str:
        return self._get_str("UUID")

    def get_service(self) -> str:
        return self._get_path("Service")

    def get_value(self) -> bytes:
        """Last value cached by the daemon; no over-the-air read."""
        return self._get_bytes("Value")

    def is_notifying(self) -> bool:
        return self._get_bool("Notifying")

    def get_flags(self) -> List[str]:
        return self._get_str_list("Flags")

    def get_mtu(self) -> int:
        return self._get_int("MTU", "u16")

    def is_notify_acquired(self) -> bool:
        return self._get_bool("NotifyAcquired")

    def is_write_acquired(self) -> bool:
        return self._get_bool("WriteAcquired")

    def get_gatt_descriptors(self) -> List[str]:
        return bus.list_descriptors(self._conn, self.object_path)

    # ------------------------------------------------------------------
    # Read / Write helpers
    # ------------------------------------------------------------------
    def read_value(self, offset: Optional[int] = None) -> bytes:
        reply = self.call_method(
            "ReadValue",
            (bus.gatt_value_options(offset),),
            DEFAULT_TIMEOUT_MS,
            signature="a{sv}",
        )
        value = bus.to_bytes(reply, self._what("ReadValue"))
        logger.debug(f"Read {len(value)} bytes from {self.object_path}")
        return value

    def write_value(self, values: Iterable[int], offset: Optional[int] = None) -> None:
        """Write and wait for the acknowledgement."""
        payload = marshal_bytes(values)
        self.call_method(
            "WriteValue",
            (payload, bus.gatt_value_options(offset)),
            GATT_WRITE_TIMEOUT_MS,
            signature="aya{sv}",
        )
        logger.debug(f"Wrote {len(payload)} bytes to {self.object_path}")

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------
    def start_notify(self) -> None:
        """Ask BlueZ to enable notifications; values arrive as ``Value`` changes."""
        self.call_method("StartNotify", timeout_ms=DEFAULT_TIMEOUT_MS)

    def stop_notify(self) -> None:
        self.call_method("StopNotify", timeout_ms=DEFAULT_TIMEOUT_MS)

    def acquire_notify(self) -> Tuple[int, int]:
        return self._acquire("AcquireNotify")

    def acquire_write(self) -> Tuple[int, int]:
        return self._acquire("AcquireWrite")

    def _acquire(self, method: str) -> Tuple[int, int]:
        fd, mtu = bus.call_method_2(
            self._conn,
            self.INTERFACE,
            self.object_path,
            method,
            (dbus.Dictionary({}, signature="sv"),),
            DEFAULT_TIMEOUT_MS,
            signature="a{sv}",
        )
        if not isinstance(fd, dbus.types.UnixFd):
            raise PropertyTypeError(self._what(method), "fd", fd)
        mtu = bus.to_int(mtu, "u16", self._what(f"{method} mtu"))
        # take() detaches the descriptor from the wrapper; ownership moves here
        raw_fd = fd.take()
        logger.debug(f"{method} on {self.object_path}: fd={raw_fd} mtu={mtu}")
        return raw_fd, mtu
