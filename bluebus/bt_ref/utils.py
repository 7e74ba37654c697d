"""
Bluetooth utility functions.
"""

from typing import Optional

import dbus

from . import constants

__all__ = [
    "dbus_to_python",
    "device_address_to_path",
    "build_match_rule",
    "timeout_seconds",
]


def dbus_to_python(data):
    if isinstance(data, dbus.String):
        data = str(data)
    if isinstance(data, dbus.ObjectPath):
        data = str(data)
    elif isinstance(data, dbus.Boolean):
        data = bool(data)
    elif isinstance(data, (dbus.Int64, dbus.Int32, dbus.Int16)):
        data = int(data)
    elif isinstance(data, (dbus.UInt64, dbus.UInt32, dbus.UInt16)):
        data = int(data)
    elif isinstance(data, dbus.Byte):
        data = int(data)
    elif isinstance(data, dbus.Double):
        data = float(data)
    elif isinstance(data, dbus.ByteArray):
        data = bytes(data)
    elif isinstance(data, dbus.Array):
        data = [dbus_to_python(value) for value in data]
    elif isinstance(data, dbus.Dictionary):
        new_data = dict()
        for key in data.keys():
            new_data[dbus_to_python(key)] = dbus_to_python(data[key])
        data = new_data
    return data


def device_address_to_path(bdaddr, adapter_path):
    # e.g.convert 12:34:44:00:66:D5 on adapter hci0 to /org/bluez/hci0/dev_12_34_44_00_66_D5
    path = adapter_path + "/dev_" + bdaddr.upper().replace(":", "_")
    return path


def build_match_rule(path: Optional[str] = None) -> str:
    """Return the BlueZ signal match rule, optionally narrowed to *path*."""
    if path:
        return f"{constants.BLUEZ_MATCH_RULE},path='{path}'"
    return constants.BLUEZ_MATCH_RULE


def timeout_seconds(timeout_ms: int) -> float:
    """dbus-python takes reply deadlines in seconds."""
    return timeout_ms / 1000.0
