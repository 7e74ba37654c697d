from __future__ import annotations

import dbus
import pytest

from bluebus.bt_ref.constants import (
    ADAPTER_INTERFACE,
    DEVICE_INTERFACE,
    GATT_SERVICE_INTERFACE,
    RESULT_ERR_BAD_REPLY,
    RESULT_ERR_METHOD_SIGNATURE_NOT_EXIST,
)
from bluebus.core.errors import (
    BusError,
    InvalidReplyError,
    ManagedObjectsError,
    PropertyMissingError,
    PropertyTypeError,
)
from bluebus.dbuslayer import bus

from conftest import FakeBluez


def test_list_adapters_returns_every_adapter_path(bluez: FakeBluez) -> None:
    bluez.add_adapter("/a0")
    bluez.add_adapter("/a1")
    bluez.add_device("/a0/d1", "/a0")

    assert bus.list_adapters(bluez) == ["/a0", "/a1"]


def test_list_adapters_empty_graph(bluez: FakeBluez) -> None:
    assert bus.list_adapters(bluez) == []


def test_list_children_excludes_siblings_of_other_parents(bluez: FakeBluez) -> None:
    bluez.add_adapter("/a0")
    bluez.add_adapter("/a1")
    bluez.add_device("/a0/d1", "/a0")
    bluez.add_device("/a0/d2", "/a0")
    bluez.add_device("/a1/d3", "/a1")

    assert bus.list_children(bluez, DEVICE_INTERFACE, "/a0", "Adapter") == ["/a0/d1", "/a0/d2"]
    assert bus.list_devices(bluez, "/a1") == ["/a1/d3"]


def test_list_children_fetches_parent_when_not_in_payload(bluez: FakeBluez, monkeypatch) -> None:
    bluez.add_object("/a0/d1/s0", GATT_SERVICE_INTERFACE, UUID=dbus.String("180f"))
    fetched = []

    def fake_get_property(conn, interface, path, name, **kwargs):
        fetched.append((path, name))
        return dbus.ObjectPath("/a0/d1")

    monkeypatch.setattr(bus, "get_property", fake_get_property)

    assert bus.list_services(bluez, "/a0/d1") == ["/a0/d1/s0"]
    assert fetched == [("/a0/d1/s0", "Device")]


def test_list_children_rejects_mistyped_parent(bluez: FakeBluez) -> None:
    bluez.add_object("/a0/d1", DEVICE_INTERFACE, Adapter=dbus.String("/a0"))

    with pytest.raises(PropertyTypeError):
        bus.list_devices(bluez, "/a0")


def test_managed_objects_none_reply_is_an_error(bluez: FakeBluez, monkeypatch) -> None:
    monkeypatch.setattr(bluez, "_managed_objects", lambda: None)

    with pytest.raises(ManagedObjectsError) as excinfo:
        bus.get_managed_objects(bluez)
    assert excinfo.value.code == RESULT_ERR_BAD_REPLY


def test_managed_objects_wrong_shape_is_an_error(bluez: FakeBluez) -> None:
    bluez.managed_objects_reply = dbus.Array([dbus.String("/a0")], signature="s")

    with pytest.raises(ManagedObjectsError):
        bus.list_adapters(bluez)


def test_get_property_missing_raises_property_missing(bluez: FakeBluez) -> None:
    bluez.add_adapter("/a0")

    with pytest.raises(PropertyMissingError) as excinfo:
        bus.get_property(bluez, ADAPTER_INTERFACE, "/a0", "Nope")
    assert excinfo.value.name == "Nope"
    assert isinstance(excinfo.value, BusError)


def test_get_property_uses_one_second_deadline(bluez: FakeBluez) -> None:
    bluez.add_adapter("/a0")

    bus.get_property(bluez, ADAPTER_INTERFACE, "/a0", "Powered")

    call = bluez.calls[-1]
    assert call["signature"] == "ss"
    assert call["timeout"] == pytest.approx(1.0)


def test_call_method_maps_dbus_errors(bluez: FakeBluez) -> None:
    with pytest.raises(BusError) as excinfo:
        bus.call_method(bluez, ADAPTER_INTERFACE, "/a0", "Frobnicate")
    assert excinfo.value.dbus_name == "org.freedesktop.DBus.Error.UnknownMethod"
    assert excinfo.value.code == RESULT_ERR_METHOD_SIGNATURE_NOT_EXIST
    assert isinstance(excinfo.value.source, dbus.exceptions.DBusException)


def test_call_method_1_rejects_empty_reply(bluez: FakeBluez) -> None:
    bluez.handlers[(ADAPTER_INTERFACE, "Nothing")] = lambda path: None

    with pytest.raises(InvalidReplyError):
        bus.call_method_1(bluez, ADAPTER_INTERFACE, "/a0", "Nothing")


def test_call_method_2_rejects_single_value(bluez: FakeBluez) -> None:
    bluez.handlers[(ADAPTER_INTERFACE, "One")] = lambda path: dbus.String("x")

    with pytest.raises(InvalidReplyError):
        bus.call_method_2(bluez, ADAPTER_INTERFACE, "/a0", "One")


def test_readers_check_tags() -> None:
    assert bus.to_bool(dbus.Boolean(True)) is True
    assert bus.to_int(dbus.Int16(-60), "i16") == -60
    assert bus.to_bytes(dbus.Array([dbus.Byte(1), dbus.Byte(2)], signature="y")) == b"\x01\x02"
    assert bus.to_bytes(dbus.ByteArray(b"\xde\xad")) == b"\xde\xad"

    with pytest.raises(PropertyTypeError):
        bus.to_bool(dbus.String("true"))
    with pytest.raises(PropertyTypeError):
        bus.to_int(dbus.Boolean(True), "u32")
    with pytest.raises(PropertyTypeError):
        bus.to_int(dbus.UInt32(5), "u16")


def test_to_bytes_map_with_integer_keys() -> None:
    value = dbus.Dictionary(
        {dbus.UInt16(0x004C): dbus.Array([dbus.Byte(2), dbus.Byte(21)], signature="y")},
        signature="qv",
    )

    assert bus.to_bytes_map(value, "u16") == {0x004C: b"\x02\x15"}


def test_gatt_value_options() -> None:
    assert dict(bus.gatt_value_options()) == {}

    options = bus.gatt_value_options(5)
    assert isinstance(options["offset"], dbus.UInt16)
    assert options["offset"] == 5
