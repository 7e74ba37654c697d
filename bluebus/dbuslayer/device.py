"""Remote device proxy over ``org.bluez.Device1``.

``connect`` returns as soon as BlueZ accepts or rejects the link.  GATT
services are resolved afterwards, so poll :meth:`Device.is_services_resolved`
or watch for ``DeviceServicesResolvedChanged`` before walking the tree.
"""

from __future__ import annotations

from typing import Dict, List, Optional

import dbus

from bluebus.ble_ops.modalias import Modalias, parse_modalias
from bluebus.bt_ref.constants import (
    DEFAULT_TIMEOUT_MS,
    DEVICE_INTERFACE,
    PAIR_TIMEOUT_MS,
    PROFILE_TIMEOUT_MS,
)
from bluebus.core import config
from bluebus.core.log import get_logger
from bluebus.dbuslayer import bus
from bluebus.dbuslayer.proxy import BluezObject

logger = get_logger(__name__)

__all__ = ["Device"]


class Device(BluezObject):
    """Wrapper around a single remote device exposed by BlueZ."""

    INTERFACE = DEVICE_INTERFACE

    # ------------------------------------------------------------------
    # GATT tree
    # ------------------------------------------------------------------
    def get_gatt_services(self) -> List[str]:
        """Service paths under this device; empty until services resolve."""
        return bus.list_services(self._conn, self.object_path)

    # ------------------------------------------------------------------
    # Properties & state helpers
    # ------------------------------------------------------------------
    def get_adapter(self) -> str:
        return self._get_path("Adapter")

    def get_address(self) -> str:
        return self._get_str("Address")

    def get_address_type(self) -> str:
        return self._get_str("AddressType")

    def get_name(self) -> str:
        return self._get_str("Name")

    def get_icon(self) -> str:
        return self._get_str("Icon")

    def get_alias(self) -> str:
        return self._get_str("Alias")

    def set_alias(self, value: str) -> None:
        self.set_property("Alias", dbus.String(value), DEFAULT_TIMEOUT_MS)

    def get_class(self) -> int:
        return self._get_int("Class", "u32")

    def get_appearance(self) -> int:
        return self._get_int("Appearance", "u16")

    def get_uuids(self) -> List[str]:
        return self._get_str_list("UUIDs")

    def is_paired(self) -> bool:
        """BlueZ publishes ``Paired`` read-only, so there is no setter.

        Pairing changes through :meth:`pair` and :meth:`cancel_pair`.
        """
        return self._get_bool("Paired")

    def is_connected(self) -> bool:
        return self._get_bool("Connected")

    def is_trusted(self) -> bool:
        return self._get_bool("Trusted")

    def set_trusted(self, value: bool) -> None:
        self.set_property("Trusted", dbus.Boolean(value), DEFAULT_TIMEOUT_MS)

    def is_blocked(self) -> bool:
        return self._get_bool("Blocked")

    def set_blocked(self, value: bool) -> None:
        self.set_property("Blocked", dbus.Boolean(value), DEFAULT_TIMEOUT_MS)

    def is_legacy_pairing(self) -> bool:
        return self._get_bool("LegacyPairing")

    def get_rssi(self) -> int:
        return self._get_int("RSSI", "i16")

    def get_tx_power(self) -> int:
        return self._get_int("TxPower", "i16")

    def is_services_resolved(self) -> bool:
        return self._get_bool("ServicesResolved")

    def get_manufacturer_data(self) -> Dict[int, bytes]:
        """Company identifier -> advertised payload."""
        return bus.to_bytes_map(self.get_property("ManufacturerData"), "u16", self._what("ManufacturerData"))

    def get_service_data(self) -> Dict[str, bytes]:
        """Service UUID -> advertised payload."""
        return bus.to_bytes_map(self.get_property("ServiceData"), "string", self._what("ServiceData"))

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

    # ---------------------------------------------------------------------
    # Connection helpers
    # ---------------------------------------------------------------------
    def connect(self, timeout_ms: Optional[int] = None) -> None:
        """Ask BlueZ to connect every auto-connectable profile.

        A local timeout does not cancel the attempt on the daemon side.
        """
        if timeout_ms is None:
            timeout_ms = config.settings.connect_timeout_ms
        logger.debug(f"Connect {self.object_path} timeout={timeout_ms}ms")
        self.call_method("Connect", timeout_ms=timeout_ms)

    def disconnect(self) -> None:
        logger.debug(f"Disconnect {self.object_path}")
        self.call_method("Disconnect", timeout_ms=DEFAULT_TIMEOUT_MS)

    def connect_profile(self, uuid: str) -> None:
        self.call_method("ConnectProfile", (dbus.String(uuid),), PROFILE_TIMEOUT_MS, signature="s")

    def disconnect_profile(self, uuid: str) -> None:
        self.call_method("DisconnectProfile", (dbus.String(uuid),), PROFILE_TIMEOUT_MS, signature="s")

    def pair(self, timeout_ms: int = PAIR_TIMEOUT_MS) -> None:
        logger.debug(f"Pair {self.object_path}")
        self.call_method("Pair", timeout_ms=timeout_ms)

    def cancel_pair(self) -> None:
        self.call_method("CancelPairing", timeout_ms=DEFAULT_TIMEOUT_MS)
