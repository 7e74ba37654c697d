from __future__ import annotations

from typing import Any, Callable, Dict, List, Tuple

import dbus
import dbus.exceptions
import dbus.lowlevel
import pytest

from bluebus.bt_ref.constants import (
    ADAPTER_INTERFACE,
    DBUS_OM_IFACE,
    DBUS_PROPERTIES,
    DEVICE_INTERFACE,
    GATT_CHARACTERISTIC_INTERFACE,
    GATT_DESCRIPTOR_INTERFACE,
    GATT_SERVICE_INTERFACE,
)
from bluebus.dbuslayer.session import Session

UUID_BATTERY = "0000180f-0000-1000-8000-00805f9b34fb"
UUID_HID = "00001812-0000-1000-8000-00805f9b34fb"


def dbus_error(name: str, message: str = "") -> dbus.exceptions.DBusException:
    return dbus.exceptions.DBusException(message or name, name=name)


class FakeBluez:
    """In-memory stand-in for a dbus-python connection talking to bluetoothd.

    ``objects`` maps object path -> interface -> property -> dbus typed value.
    Method calls not handled by the object manager or the properties
    interface are dispatched to ``handlers[(interface, method)]``.
    """

    def __init__(self) -> None:
        self.objects: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.handlers: Dict[Tuple[str, str], Callable[..., Any]] = {}
        self.calls: List[Dict[str, Any]] = []
        self.filters: List[Callable] = []
        self.match_rules: List[str] = []
        self.closed = False
        self.managed_objects_reply: Any = None
        self._install_adapter_handlers()

    # ------------------------------------------------------------------
    # Graph building
    # ------------------------------------------------------------------
    def add_object(self, path: str, interface: str, **props: Any) -> None:
        self.objects.setdefault(path, {})[interface] = dict(props)

    def add_adapter(self, path: str = "/a0", **props: Any) -> None:
        defaults = {
            "Address": dbus.String("00:1A:7D:DA:71:13"),
            "Name": dbus.String("hci0"),
            "Alias": dbus.String("bench"),
            "Powered": dbus.Boolean(True),
            "Discovering": dbus.Boolean(False),
            "DiscoverableTimeout": dbus.UInt32(180),
            "Modalias": dbus.String("usb:v1D6Bp0246d052A"),
        }
        defaults.update(props)
        self.add_object(path, ADAPTER_INTERFACE, **defaults)

    def add_device(self, path: str, adapter: str, **props: Any) -> None:
        self.add_object(path, DEVICE_INTERFACE, Adapter=dbus.ObjectPath(adapter), **props)

    def prop(self, path: str, interface: str, name: str) -> Any:
        return self.objects[path][interface][name]

    def calls_to(self, method: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["method"] == method]

    # ------------------------------------------------------------------
    # dbus.connection.Connection surface
    # ------------------------------------------------------------------
    def call_blocking(self, bus_name, object_path, dbus_interface, method, signature, args, timeout=-1.0):
        self.calls.append(
            {
                "service": bus_name,
                "path": object_path,
                "interface": dbus_interface,
                "method": method,
                "signature": signature,
                "args": args,
                "timeout": timeout,
            }
        )
        if dbus_interface == DBUS_OM_IFACE and method == "GetManagedObjects":
            return self._managed_objects()
        if dbus_interface == DBUS_PROPERTIES and method == "Get":
            interface, name = args
            try:
                return self.objects[object_path][interface][name]
            except KeyError:
                raise dbus_error(
                    "org.freedesktop.DBus.Error.InvalidArgs",
                    f"No such property '{name}'",
                ) from None
        if dbus_interface == DBUS_PROPERTIES and method == "Set":
            interface, name, value = args
            if interface not in self.objects.get(object_path, {}):
                raise dbus_error("org.freedesktop.DBus.Error.UnknownObject")
            self.objects[object_path][interface][name] = value
            return None

        handler = self.handlers.get((dbus_interface, method))
        if handler is None:
            raise dbus_error("org.freedesktop.DBus.Error.UnknownMethod", f"{dbus_interface}.{method}")
        return handler(object_path, *args)

    def add_match_string(self, rule: str) -> None:
        self.match_rules.append(rule)

    def add_message_filter(self, func: Callable) -> None:
        self.filters.append(func)

    def remove_message_filter(self, func: Callable) -> None:
        self.filters.remove(func)

    def close(self) -> None:
        self.closed = True

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------
    def emit(self, path: str, interface: str, member: str, signature: str, *args: Any) -> bool:
        """Deliver a signal to the installed filters; usable as a GLib source."""
        message = dbus.lowlevel.SignalMessage(path, interface, member)
        if args:
            message.append(*args, signature=signature)
        for func in list(self.filters):
            func(self, message)
        return False

    def emit_properties_changed(self, path: str, interface: str, changed: Dict[str, Any]) -> bool:
        return self.emit(
            path,
            DBUS_PROPERTIES,
            "PropertiesChanged",
            "sa{sv}as",
            interface,
            dbus.Dictionary(changed, signature="sv"),
            dbus.Array([], signature="s"),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _managed_objects(self) -> Any:
        if self.managed_objects_reply is not None:
            return self.managed_objects_reply
        return dbus.Dictionary(
            {
                dbus.ObjectPath(path): dbus.Dictionary(
                    {
                        dbus.String(iface): dbus.Dictionary(props, signature="sv")
                        for iface, props in interfaces.items()
                    },
                    signature="sa{sv}",
                )
                for path, interfaces in self.objects.items()
            },
            signature="oa{sa{sv}}",
        )

    def _install_adapter_handlers(self) -> None:
        def start_discovery(path):
            self.objects[path][ADAPTER_INTERFACE]["Discovering"] = dbus.Boolean(True)

        def stop_discovery(path):
            props = self.objects[path][ADAPTER_INTERFACE]
            if not props.get("Discovering"):
                raise dbus_error("org.bluez.Error.Failed", "No discovery started")
            props["Discovering"] = dbus.Boolean(False)

        self.handlers[(ADAPTER_INTERFACE, "StartDiscovery")] = start_discovery
        self.handlers[(ADAPTER_INTERFACE, "StopDiscovery")] = stop_discovery
        self.handlers[(ADAPTER_INTERFACE, "SetDiscoveryFilter")] = lambda path, flt: None


@pytest.fixture
def bluez() -> FakeBluez:
    return FakeBluez()


@pytest.fixture
def session(bluez: FakeBluez) -> Session:
    return Session(bluez, "type='signal',sender='org.bluez'")


@pytest.fixture
def gatt_tree(bluez: FakeBluez) -> FakeBluez:
    """/a0 with device /a0/d1 carrying one service, characteristic and descriptor."""
    bluez.add_adapter("/a0")
    bluez.add_device(
        "/a0/d1",
        "/a0",
        Address=dbus.String("AA:BB:CC:DD:EE:FF"),
        UUIDs=dbus.Array([dbus.String(UUID_BATTERY)], signature="s"),
        Connected=dbus.Boolean(True),
        ServicesResolved=dbus.Boolean(True),
    )
    bluez.add_object(
        "/a0/d1/s0",
        GATT_SERVICE_INTERFACE,
        UUID=dbus.String(UUID_BATTERY),
        Primary=dbus.Boolean(True),
        Device=dbus.ObjectPath("/a0/d1"),
    )
    bluez.add_object(
        "/a0/d1/s0/c0",
        GATT_CHARACTERISTIC_INTERFACE,
        UUID=dbus.String("00002a19-0000-1000-8000-00805f9b34fb"),
        Service=dbus.ObjectPath("/a0/d1/s0"),
        Value=dbus.Array([dbus.Byte(0x64)], signature="y"),
        Notifying=dbus.Boolean(False),
        Flags=dbus.Array([dbus.String("read"), dbus.String("notify")], signature="s"),
        MTU=dbus.UInt16(247),
    )
    bluez.add_object(
        "/a0/d1/s0/c0/d0",
        GATT_DESCRIPTOR_INTERFACE,
        UUID=dbus.String("00002902-0000-1000-8000-00805f9b34fb"),
        Characteristic=dbus.ObjectPath("/a0/d1/s0/c0"),
        Value=dbus.Array([dbus.Byte(0), dbus.Byte(0)], signature="y"),
        Flags=dbus.Array([dbus.String("read"), dbus.String("write")], signature="s"),
    )
    return bluez
