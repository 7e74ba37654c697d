#!/usr/bin/python3

"""Core error classes for bluebus.

Every failure surfaced by the library is a :class:`BluebusError`.  The
``.code`` attribute maps to ``bt_ref.constants`` RESULT_* values so callers
can branch on an integer without string-matching D-Bus error names.
"""

from __future__ import annotations

from typing import Any, Optional

import dbus.exceptions

from bluebus.bt_ref.constants import (
    RESULT_ERR,
    RESULT_ERR_ACCESS_DENIED,
    RESULT_ERR_ACTION_IN_PROGRESS,
    RESULT_ERR_BAD_ARGS,
    RESULT_ERR_BAD_REPLY,
    RESULT_ERR_DEPRECATED,
    RESULT_ERR_METHOD_SIGNATURE_NOT_EXIST,
    RESULT_ERR_NO_ADAPTER_FOUND,
    RESULT_ERR_NO_DEVICES_FOUND,
    RESULT_ERR_NO_REPLY,
    RESULT_ERR_NOT_AUTHORIZED,
    RESULT_ERR_NOT_CONNECTED,
    RESULT_ERR_NOT_FOUND,
    RESULT_ERR_NOT_IMPLEMENTED,
    RESULT_ERR_NOT_PERMITTED,
    RESULT_ERR_NOT_SUPPORTED,
    RESULT_ERR_READ_NOT_PERMITTED,
    RESULT_ERR_TRANSFER_STATUS,
    RESULT_ERR_UNKNOWN_CONNECT_FAILURE,
    RESULT_ERR_UNKNOWN_OBJECT,
    RESULT_ERR_UNKNOWN_SERVCE,
    RESULT_ERR_WRITE_NOT_PERMITTED,
    RESULT_ERR_NOTIFY_NOT_PERMITTED,
    RESULT_EXCEPTION,
)
from bluebus.core import log as _core_log


class BluebusError(Exception):
    """Base exception for everything raised by bluebus."""

    def __init__(self, message: str, code: int = RESULT_ERR):
        super().__init__(message)
        self.code = code


class BusError(BluebusError):
    """Failure from the bus transport: send, reply error or decoding mismatch.

    ``source`` is the underlying ``DBusException`` when there is one, or a
    short description of the decoding problem otherwise.
    """

    def __init__(self, source: Any, code: Optional[int] = None, message: Optional[str] = None):
        if isinstance(source, dbus.exceptions.DBusException):
            self.dbus_name: Optional[str] = source.get_dbus_name()
            if code is None:
                code = decode_dbus_error(source)
        else:
            self.dbus_name = None
        super().__init__(message or f"D-Bus error: {source}", RESULT_EXCEPTION if code is None else code)
        self.source = source


class ManagedObjectsError(BusError):
    """``GetManagedObjects`` returned no payload or an unexpected shape."""

    def __init__(self, reason: str):
        super().__init__(reason, RESULT_ERR_BAD_REPLY, f"Managed objects unavailable: {reason}")


class PropertyMissingError(BusError):
    """A property the caller relies on is not published by the object."""

    def __init__(self, path: str, interface: str, name: str, source: Any = None):
        super().__init__(
            source if source is not None else name,
            RESULT_ERR_NOT_FOUND,
            f"Property {interface}.{name} missing on {path}",
        )
        self.path = path
        self.interface = interface
        self.name = name


class PropertyTypeError(BusError):
    """A variant did not carry the D-Bus type the property catalog requires."""

    def __init__(self, what: str, expected: str, value: Any):
        super().__init__(
            value,
            RESULT_ERR_BAD_REPLY,
            f"{what}: expected {expected}, got {type(value).__name__}",
        )
        self.what = what
        self.expected = expected


class InvalidReplyError(BusError):
    """A method reply did not have the number or kind of arguments expected."""

    def __init__(self, method: str, reply: Any):
        super().__init__(reply, RESULT_ERR_BAD_REPLY, f"Unexpected reply to {method}: {reply!r}")
        self.method = method


class AdapterNotFoundError(BluebusError):
    """No adapter enumerated, or a named path is not an adapter."""

    def __init__(self, path: Optional[str] = None):
        msg = "Bluetooth adapter not found"
        if path:
            msg += f": {path}"
        super().__init__(msg, RESULT_ERR_NO_ADAPTER_FOUND)
        self.path = path


class NoDeviceFoundError(BluebusError):
    """Device enumeration under an adapter came back empty."""

    def __init__(self, adapter_path: Optional[str] = None):
        msg = "No device found"
        if adapter_path:
            msg += f" on {adapter_path}"
        super().__init__(msg, RESULT_ERR_NO_DEVICES_FOUND)
        self.adapter_path = adapter_path


class DeprecatedFeatureError(BluebusError):
    """A legacy entry point was called; ``name`` is its replacement."""

    def __init__(self, name: str):
        super().__init__(f"Deprecated, please use {name}", RESULT_ERR_DEPRECATED)
        self.name = name


class NotImplementedFeatureError(BluebusError):
    """Surface that is intentionally left unimplemented."""

    def __init__(self, name: str):
        super().__init__(f"Function {name} not implemented", RESULT_ERR_NOT_IMPLEMENTED)
        self.name = name


class FailedToGetStatusError(BluebusError):
    """OBEX transfer ``Status`` was not one of the known state strings."""

    def __init__(self, value: Any = None):
        super().__init__(f"Failed to get transfer status (got {value!r})", RESULT_ERR_TRANSFER_STATUS)
        self.value = value


class UnknownError(BluebusError):
    """Parse or invariant violation not covered by the other variants."""

    def __init__(self, message: str):
        super().__init__(f"An unknown error has occurred: {message}", RESULT_ERR)


# ---------------------------------------------------------------------------
# BlueZ/DBus error name -> RESULT_ERR mapping
# ---------------------------------------------------------------------------

_DBUS_ERROR_NAME_MAP = {
    "org.freedesktop.DBus.Error.AccessDenied": RESULT_ERR_ACCESS_DENIED,
    "org.freedesktop.DBus.Error.InvalidArgs": RESULT_ERR_BAD_ARGS,
    "org.freedesktop.DBus.Error.NoReply": RESULT_ERR_NO_REPLY,
    "org.freedesktop.DBus.Error.Timeout": RESULT_ERR_NO_REPLY,
    "org.freedesktop.DBus.Error.ServiceUnknown": RESULT_ERR_UNKNOWN_SERVCE,
    "org.freedesktop.DBus.Error.UnknownObject": RESULT_ERR_UNKNOWN_OBJECT,
    "org.freedesktop.DBus.Error.UnknownMethod": RESULT_ERR_METHOD_SIGNATURE_NOT_EXIST,
    "org.bluez.Error.NotConnected": RESULT_ERR_NOT_CONNECTED,
    "org.bluez.Error.Failed": RESULT_ERR,
    "org.bluez.Error.NotPermitted": RESULT_ERR_NOT_PERMITTED,
    "org.bluez.Error.NotAuthorized": RESULT_ERR_NOT_AUTHORIZED,
    "org.bluez.Error.NotSupported": RESULT_ERR_NOT_SUPPORTED,
    "org.bluez.Error.InProgress": RESULT_ERR_ACTION_IN_PROGRESS,
    "org.bluez.Error.InvalidArguments": RESULT_ERR_BAD_ARGS,
    "org.bluez.Error.InvalidValueLength": RESULT_ERR_BAD_ARGS,
    "org.bluez.Error.NotFound": RESULT_ERR_NOT_FOUND,
    "org.bluez.Error.DoesNotExist": RESULT_ERR_NOT_FOUND,
    "org.bluez.obex.Error.Failed": RESULT_ERR,
}

# Fallback substring search when name not present (BlueZ mixes English strings)
_DBUS_MESSAGE_MAP = {
    "Not Connected": RESULT_ERR_NOT_CONNECTED,
    "Connection Attempt Failed": RESULT_ERR_UNKNOWN_CONNECT_FAILURE,
    "Operation already in progress": RESULT_ERR_ACTION_IN_PROGRESS,
    "Authentication Failed": RESULT_ERR_ACCESS_DENIED,
    "Timeout": RESULT_ERR_NO_REPLY,
    "read not permitted": RESULT_ERR_READ_NOT_PERMITTED,
    "write not permitted": RESULT_ERR_WRITE_NOT_PERMITTED,
    "notify not permitted": RESULT_ERR_NOTIFY_NOT_PERMITTED,
    "not permitted": RESULT_ERR_NOT_PERMITTED,
}


def decode_dbus_error(exc: dbus.exceptions.DBusException) -> int:
    """Return RESULT_ERR_* constant matching *exc*.

    Falls back to RESULT_ERR on unknown errors.
    """
    name = exc.get_dbus_name()
    if name in _DBUS_ERROR_NAME_MAP:
        return _DBUS_ERROR_NAME_MAP[name]

    msg = (exc.get_dbus_message() or "").lower()
    for substr, code in _DBUS_MESSAGE_MAP.items():
        if substr.lower() in msg:
            return code

    return RESULT_ERR


def map_dbus_error(exc: dbus.exceptions.DBusException) -> BusError:
    """Return a :class:`BusError` wrapping the given D-Bus exception."""
    err = BusError(exc)
    _core_log.logging__debug_log(f"[BusError] code={err.code} name={err.dbus_name} msg={exc}")
    return err


__all__ = [
    "BluebusError",
    "BusError",
    "ManagedObjectsError",
    "PropertyMissingError",
    "PropertyTypeError",
    "InvalidReplyError",
    "AdapterNotFoundError",
    "NoDeviceFoundError",
    "DeprecatedFeatureError",
    "NotImplementedFeatureError",
    "FailedToGetStatusError",
    "UnknownError",
    "decode_dbus_error",
    "map_dbus_error",
]
