"""Decode raw BlueZ signal messages into typed events.

Only ``PropertiesChanged``, ``InterfacesAdded`` and ``InterfacesRemoved`` are
recognised.  Anything else decodes to ``None`` (or an empty list); an
unknown message is never an error.

Messages are read through the dbus-python message API (``get_type``,
``get_interface``, ``get_member``, ``get_path``, ``get_args_list``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import dbus
import dbus.lowlevel

from bluebus.bt_ref.constants import (
    ADAPTER_INTERFACE,
    DBUS_OM_IFACE,
    DBUS_PROPERTIES,
    DEVICE_INTERFACE,
    GATT_CHARACTERISTIC_INTERFACE,
    GATT_DESCRIPTOR_INTERFACE,
)
from bluebus.bt_ref.utils import dbus_to_python
from bluebus.core.errors import BusError
from bluebus.core.log import logging__signal_log
from bluebus.dbuslayer import bus

__all__ = [
    "BluetoothEvent",
    "AdapterPoweredChanged",
    "AdapterDiscoverableChanged",
    "AdapterDiscoveringChanged",
    "AdapterPairableChanged",
    "DeviceConnectedChanged",
    "DevicePairedChanged",
    "DeviceServicesResolvedChanged",
    "DeviceRssiChanged",
    "DeviceManufacturerDataChanged",
    "CharacteristicValueChanged",
    "CharacteristicNotifyingChanged",
    "DescriptorValueChanged",
    "InterfacesAdded",
    "InterfacesRemoved",
    "decode",
    "decode_all",
]


@dataclass(frozen=True)
class BluetoothEvent:
    """Base of every decoded event; ``name`` is the changed property."""

    path: str
    value: Any
    name: str = field(default="", init=False)


@dataclass(frozen=True)
class AdapterPoweredChanged(BluetoothEvent):
    name: str = field(default="Powered", init=False)


@dataclass(frozen=True)
class AdapterDiscoverableChanged(BluetoothEvent):
    name: str = field(default="Discoverable", init=False)


@dataclass(frozen=True)
class AdapterDiscoveringChanged(BluetoothEvent):
    name: str = field(default="Discovering", init=False)


@dataclass(frozen=True)
class AdapterPairableChanged(BluetoothEvent):
    name: str = field(default="Pairable", init=False)


@dataclass(frozen=True)
class DeviceConnectedChanged(BluetoothEvent):
    name: str = field(default="Connected", init=False)


@dataclass(frozen=True)
class DevicePairedChanged(BluetoothEvent):
    name: str = field(default="Paired", init=False)


@dataclass(frozen=True)
class DeviceServicesResolvedChanged(BluetoothEvent):
    name: str = field(default="ServicesResolved", init=False)


@dataclass(frozen=True)
class DeviceRssiChanged(BluetoothEvent):
    name: str = field(default="RSSI", init=False)


@dataclass(frozen=True)
class DeviceManufacturerDataChanged(BluetoothEvent):
    name: str = field(default="ManufacturerData", init=False)


@dataclass(frozen=True)
class CharacteristicValueChanged(BluetoothEvent):
    name: str = field(default="Value", init=False)


@dataclass(frozen=True)
class CharacteristicNotifyingChanged(BluetoothEvent):
    name: str = field(default="Notifying", init=False)


@dataclass(frozen=True)
class DescriptorValueChanged(BluetoothEvent):
    name: str = field(default="Value", init=False)


@dataclass(frozen=True)
class InterfacesAdded(BluetoothEvent):
    """``value`` maps each added interface to its plain-Python properties."""

    name: str = field(default="InterfacesAdded", init=False)


@dataclass(frozen=True)
class InterfacesRemoved(BluetoothEvent):
    """``value`` lists the interface names that disappeared."""

    name: str = field(default="InterfacesRemoved", init=False)


# (interface, property) -> (event class, converter)
_Converter = Callable[[Any, str], Any]

_PROPERTY_CATALOG: Dict[Tuple[str, str], Tuple[type, _Converter]] = {
    (ADAPTER_INTERFACE, "Powered"): (AdapterPoweredChanged, bus.to_bool),
    (ADAPTER_INTERFACE, "Discoverable"): (AdapterDiscoverableChanged, bus.to_bool),
    (ADAPTER_INTERFACE, "Discovering"): (AdapterDiscoveringChanged, bus.to_bool),
    (ADAPTER_INTERFACE, "Pairable"): (AdapterPairableChanged, bus.to_bool),
    (DEVICE_INTERFACE, "Connected"): (DeviceConnectedChanged, bus.to_bool),
    (DEVICE_INTERFACE, "Paired"): (DevicePairedChanged, bus.to_bool),
    (DEVICE_INTERFACE, "ServicesResolved"): (DeviceServicesResolvedChanged, bus.to_bool),
    (DEVICE_INTERFACE, "RSSI"): (DeviceRssiChanged, lambda v, w: bus.to_int(v, "i16", w)),
    (DEVICE_INTERFACE, "ManufacturerData"): (
        DeviceManufacturerDataChanged,
        lambda v, w: bus.to_bytes_map(v, "u16", w),
    ),
    (GATT_CHARACTERISTIC_INTERFACE, "Value"): (CharacteristicValueChanged, bus.to_bytes),
    (GATT_CHARACTERISTIC_INTERFACE, "Notifying"): (CharacteristicNotifyingChanged, bus.to_bool),
    (GATT_DESCRIPTOR_INTERFACE, "Value"): (DescriptorValueChanged, bus.to_bytes),
}


def _properties_changed(path: str, args: List[Any]) -> List[BluetoothEvent]:
    if len(args) < 2 or not isinstance(args[1], dict):
        return []
    interface = str(args[0])
    events: List[BluetoothEvent] = []
    for prop, value in args[1].items():
        entry = _PROPERTY_CATALOG.get((interface, str(prop)))
        if entry is None:
            continue
        event_cls, convert = entry
        try:
            events.append(event_cls(path, convert(value, f"{path} {interface}.{prop}")))
        except BusError as exc:
            # A mistyped payload is not one of the documented shapes
            logging__signal_log(f"[-] Ignoring {interface}.{prop} on {path}: {exc}")
    return events


def decode_all(message) -> List[BluetoothEvent]:
    """Return every recognised event carried by *message*."""
    if message.get_type() != dbus.lowlevel.MESSAGE_TYPE_SIGNAL:
        return []

    interface = message.get_interface()
    member = message.get_member()
    path = str(message.get_path())
    args = message.get_args_list()

    if interface == DBUS_PROPERTIES and member == "PropertiesChanged":
        events = _properties_changed(path, args)
    elif interface == DBUS_OM_IFACE and member == "InterfacesAdded" and len(args) >= 2:
        events = [InterfacesAdded(str(args[0]), dbus_to_python(args[1]))]
    elif interface == DBUS_OM_IFACE and member == "InterfacesRemoved" and len(args) >= 2:
        events = [InterfacesRemoved(str(args[0]), [str(i) for i in args[1]])]
    else:
        events = []

    for event in events:
        logging__signal_log(f"event {event}")
    return events


def decode(message) -> Optional[BluetoothEvent]:
    """Return the first recognised event in *message*, or ``None``."""
    events = decode_all(message)
    return events[0] if events else None
