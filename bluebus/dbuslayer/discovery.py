"""Scoped device discovery on one adapter.

A :class:`DiscoverySession` is *not* stopped when it is garbage collected:
BlueZ keeps discovering until ``StopDiscovery`` is called by the same bus
client, so callers either call :meth:`DiscoverySession.stop` or use the
session as a context manager.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import dbus

from bluebus.bt_ref.constants import ADAPTER_INTERFACE, DEFAULT_TIMEOUT_MS
from bluebus.core.log import get_logger
from bluebus.dbuslayer.proxy import BluezObject

logger = get_logger(__name__)

__all__ = ["DiscoverySession", "build_discovery_filter"]


def build_discovery_filter(
    uuids: Optional[Iterable[str]] = None,
    rssi: Optional[int] = None,
    pathloss: Optional[int] = None,
    transport: Optional[str] = None,
    duplicate_data: Optional[bool] = None,
) -> dbus.Dictionary:
    """Marshal the ``SetDiscoveryFilter`` argument.

    Keys appear only for the arguments the caller actually passed.
    """
    entries: Dict[str, Any] = {}
    if uuids is not None:
        entries["UUIDs"] = dbus.Array([dbus.String(u) for u in uuids], signature="s")
    if rssi is not None:
        entries["RSSI"] = dbus.Int16(rssi)
    if pathloss is not None:
        entries["Pathloss"] = dbus.UInt16(pathloss)
    if transport is not None:
        entries["Transport"] = dbus.String(transport)
    if duplicate_data is not None:
        entries["DuplicateData"] = dbus.Boolean(duplicate_data)
    return dbus.Dictionary(entries, signature="sv")


class DiscoverySession(BluezObject):
    """Start/stop handle for discovery on the adapter at ``object_path``."""

    INTERFACE = ADAPTER_INTERFACE

    @classmethod
    def create(cls, session, adapter_path: str) -> "DiscoverySession":
        return cls(session, adapter_path)

    @property
    def adapter_path(self) -> str:
        return self.object_path

    def start(self) -> None:
        logger.debug(f"StartDiscovery on {self.object_path}")
        self.call_method("StartDiscovery", timeout_ms=DEFAULT_TIMEOUT_MS)

    def stop(self) -> None:
        logger.debug(f"StopDiscovery on {self.object_path}")
        self.call_method("StopDiscovery", timeout_ms=DEFAULT_TIMEOUT_MS)

    def set_filter(
        self,
        uuids: Optional[Iterable[str]] = None,
        rssi: Optional[int] = None,
        pathloss: Optional[int] = None,
        *,
        transport: Optional[str] = None,
        duplicate_data: Optional[bool] = None,
    ) -> None:
        discovery_filter = build_discovery_filter(uuids, rssi, pathloss, transport, duplicate_data)
        logger.debug(f"SetDiscoveryFilter on {self.object_path}: {dict(discovery_filter)}")
        self.call_method(
            "SetDiscoveryFilter",
            (discovery_filter,),
            DEFAULT_TIMEOUT_MS,
            signature="a{sv}",
        )

    def __enter__(self) -> "DiscoverySession":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
