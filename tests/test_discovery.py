from __future__ import annotations

import dbus
import pytest

from bluebus.bt_ref.constants import ADAPTER_INTERFACE
from bluebus.core.errors import BusError
from bluebus.dbuslayer.discovery import DiscoverySession, build_discovery_filter

from conftest import UUID_HID, FakeBluez


def _discovering(bluez: FakeBluez) -> bool:
    return bool(bluez.prop("/a0", ADAPTER_INTERFACE, "Discovering"))


def test_start_stop_toggles_discovering(session, bluez: FakeBluez) -> None:
    bluez.add_adapter("/a0")
    discovery = DiscoverySession.create(session, "/a0")

    discovery.start()
    assert _discovering(bluez) is True
    discovery.stop()
    assert _discovering(bluez) is False


def test_stop_without_start_surfaces_daemon_error(session, bluez: FakeBluez) -> None:
    bluez.add_adapter("/a0")

    with pytest.raises(BusError) as excinfo:
        DiscoverySession.create(session, "/a0").stop()
    assert excinfo.value.dbus_name == "org.bluez.Error.Failed"


def test_filter_only_carries_given_keys(session, bluez: FakeBluez) -> None:
    bluez.add_adapter("/a0")
    discovery = DiscoverySession.create(session, "/a0")

    discovery.start()
    discovery.set_filter(uuids=[UUID_HID], rssi=-80, pathloss=None)
    discovery.stop()

    assert [c["method"] for c in bluez.calls] == ["StartDiscovery", "SetDiscoveryFilter", "StopDiscovery"]
    call = bluez.calls_to("SetDiscoveryFilter")[0]
    assert call["signature"] == "a{sv}"
    (flt,) = call["args"]
    assert set(flt) == {"UUIDs", "RSSI"}
    assert list(flt["UUIDs"]) == [UUID_HID]
    assert isinstance(flt["RSSI"], dbus.Int16) and flt["RSSI"] == -80
    assert _discovering(bluez) is False


def test_build_filter_types() -> None:
    flt = build_discovery_filter(pathloss=4, transport="le", duplicate_data=False)

    assert set(flt) == {"Pathloss", "Transport", "DuplicateData"}
    assert isinstance(flt["Pathloss"], dbus.UInt16)
    assert isinstance(flt["Transport"], dbus.String)
    assert isinstance(flt["DuplicateData"], dbus.Boolean)
    assert dict(build_discovery_filter()) == {}


def test_context_manager_stops_on_exit(session, bluez: FakeBluez) -> None:
    bluez.add_adapter("/a0")

    with DiscoverySession.create(session, "/a0") as discovery:
        assert discovery.adapter_path == "/a0"
        assert _discovering(bluez) is True
    assert _discovering(bluez) is False
