"""Typed facade over a dbus-python connection.

Every remote call in bluebus funnels through this module so that reply
deadlines, D-Bus signatures and error mapping are handled in one place.
The *conn* argument is any object offering ``call_blocking`` with the
signature of :meth:`dbus.connection.Connection.call_blocking`.

Readers come in two layers: :func:`get_property` returns the raw D-Bus typed
value, while the ``to_*`` helpers check the type tag and convert to plain
Python, raising :class:`PropertyTypeError` on mismatch.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

import dbus

from bluebus.bt_ref.constants import (
    ADAPTER_INTERFACE,
    BLUEZ_SERVICE_NAME,
    DBUS_OM_IFACE,
    DBUS_PROPERTIES,
    DBUS_ROOT_PATH,
    DEFAULT_TIMEOUT_MS,
    DEVICE_INTERFACE,
    GATT_CHARACTERISTIC_INTERFACE,
    GATT_DESCRIPTOR_INTERFACE,
    GATT_SERVICE_INTERFACE,
    PARENT_PROPERTY,
    PROPERTY_TIMEOUT_MS,
)
from bluebus.bt_ref.utils import timeout_seconds
from bluebus.core.errors import (
    InvalidReplyError,
    ManagedObjectsError,
    PropertyMissingError,
    PropertyTypeError,
    map_dbus_error,
)
from bluebus.core.log import get_logger

logger = get_logger(__name__)

__all__ = [
    "get_managed_objects",
    "get_property",
    "set_property",
    "call_method",
    "call_method_1",
    "call_method_2",
    "list_adapters",
    "list_children",
    "list_devices",
    "list_services",
    "list_characteristics",
    "list_descriptors",
    "gatt_value_options",
    "expect",
    "to_bool",
    "to_int",
    "to_str",
    "to_path",
    "to_str_list",
    "to_path_list",
    "to_bytes",
    "to_bytes_map",
]

_INVALID_ARGS = "org.freedesktop.DBus.Error.InvalidArgs"

# D-Bus type tags accepted for each catalog kind
_TAGS: Dict[str, Tuple[type, ...]] = {
    "bool": (dbus.Boolean,),
    "byte": (dbus.Byte,),
    "i16": (dbus.Int16,),
    "u16": (dbus.UInt16,),
    "i32": (dbus.Int32,),
    "u32": (dbus.UInt32,),
    "u64": (dbus.UInt64,),
    "string": (dbus.String,),
    "path": (dbus.ObjectPath,),
    "array": (dbus.Array,),
    "bytes": (dbus.Array, dbus.ByteArray),
    "dict": (dbus.Dictionary,),
}


# ---------------------------------------------------------------------------
# Tag checks and conversions
# ---------------------------------------------------------------------------

def expect(value: Any, kind: str, what: str = "value") -> Any:
    """Return *value* unchanged if its D-Bus tag matches *kind*."""
    tags = _TAGS[kind]
    # dbus.Boolean subclasses int; keep it out of integer kinds
    if kind != "bool" and isinstance(value, dbus.Boolean):
        raise PropertyTypeError(what, kind, value)
    if not isinstance(value, tags):
        raise PropertyTypeError(what, kind, value)
    return value


def to_bool(value: Any, what: str = "value") -> bool:
    return bool(expect(value, "bool", what))


def to_int(value: Any, kind: str, what: str = "value") -> int:
    return int(expect(value, kind, what))


def to_str(value: Any, what: str = "value") -> str:
    return str(expect(value, "string", what))


def to_path(value: Any, what: str = "value") -> str:
    return str(expect(value, "path", what))


def to_str_list(value: Any, what: str = "value") -> List[str]:
    return [to_str(item, f"{what}[]") for item in expect(value, "array", what)]


def to_path_list(value: Any, what: str = "value") -> List[str]:
    return [to_path(item, f"{what}[]") for item in expect(value, "array", what)]


def to_bytes(value: Any, what: str = "value") -> bytes:
    """Convert ``ay`` (``dbus.Array`` of ``dbus.Byte`` or ``dbus.ByteArray``)."""
    expect(value, "bytes", what)
    if isinstance(value, dbus.ByteArray):
        return bytes(value)
    return bytes(to_int(item, "byte", f"{what}[]") for item in value)


def to_bytes_map(value: Any, key_kind: str, what: str = "value") -> Dict[Any, bytes]:
    """Convert ``a{qv}`` / ``a{sv}`` maps whose variants carry byte arrays."""
    result: Dict[Any, bytes] = {}
    for key, item in expect(value, "dict", what).items():
        if key_kind == "string":
            pkey: Any = to_str(key, f"{what} key")
        else:
            pkey = to_int(key, key_kind, f"{what} key")
        result[pkey] = to_bytes(item, f"{what}[{pkey}]")
    return result


# ---------------------------------------------------------------------------
# Remote calls
# ---------------------------------------------------------------------------

def call_method(
    conn,
    interface: str,
    path: str,
    method: str,
    args: Sequence[Any] = (),
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    *,
    signature: Optional[str] = None,
    service: str = BLUEZ_SERVICE_NAME,
) -> Any:
    """Invoke *method* and return the raw reply.

    dbus-python hands back ``None`` for an empty reply, the sole value for a
    single-argument reply and a tuple otherwise.
    """
    logger.debug(f"call {service} {path} {interface}.{method} sig={signature} timeout={timeout_ms}ms")
    try:
        return conn.call_blocking(
            service,
            path,
            interface,
            method,
            signature,
            tuple(args),
            timeout=timeout_seconds(timeout_ms),
        )
    except dbus.exceptions.DBusException as e:
        raise map_dbus_error(e) from e


def call_method_1(conn, interface: str, path: str, method: str, args: Sequence[Any] = (),
                  timeout_ms: int = DEFAULT_TIMEOUT_MS, **kwargs) -> Any:
    """Invoke *method* expecting exactly one return value."""
    reply = call_method(conn, interface, path, method, args, timeout_ms, **kwargs)
    if reply is None or isinstance(reply, tuple):
        raise InvalidReplyError(method, reply)
    return reply


def call_method_2(conn, interface: str, path: str, method: str, args: Sequence[Any] = (),
                  timeout_ms: int = DEFAULT_TIMEOUT_MS, **kwargs) -> Tuple[Any, Any]:
    """Invoke *method* expecting exactly two return values."""
    reply = call_method(conn, interface, path, method, args, timeout_ms, **kwargs)
    if not isinstance(reply, tuple) or len(reply) != 2:
        raise InvalidReplyError(method, reply)
    return reply


def get_property(conn, interface: str, path: str, name: str, *,
                 service: str = BLUEZ_SERVICE_NAME) -> Any:
    """Read one property through ``org.freedesktop.DBus.Properties.Get``."""
    try:
        return conn.call_blocking(
            service,
            path,
            DBUS_PROPERTIES,
            "Get",
            "ss",
            (interface, name),
            timeout=timeout_seconds(PROPERTY_TIMEOUT_MS),
        )
    except dbus.exceptions.DBusException as e:
        # BlueZ answers InvalidArgs for properties the object does not publish
        if e.get_dbus_name() == _INVALID_ARGS:
            raise PropertyMissingError(path, interface, name, e) from e
        raise map_dbus_error(e) from e


def set_property(conn, interface: str, path: str, name: str, value: Any,
                 timeout_ms: int = DEFAULT_TIMEOUT_MS, *,
                 service: str = BLUEZ_SERVICE_NAME) -> None:
    """Write one property; *value* must already carry its D-Bus type."""
    logger.debug(f"set {path} {interface}.{name}={value!r} timeout={timeout_ms}ms")
    try:
        conn.call_blocking(
            service,
            path,
            DBUS_PROPERTIES,
            "Set",
            "ssv",
            (interface, name, value),
            timeout=timeout_seconds(timeout_ms),
        )
    except dbus.exceptions.DBusException as e:
        raise map_dbus_error(e) from e


# ---------------------------------------------------------------------------
# Object graph enumeration
# ---------------------------------------------------------------------------

def get_managed_objects(conn) -> List[Tuple[str, Dict[str, Dict[str, Any]]]]:
    """Return ``[(path, {interface: {property: value}})]`` in daemon order."""
    reply = call_method(
        conn,
        DBUS_OM_IFACE,
        DBUS_ROOT_PATH,
        "GetManagedObjects",
        timeout_ms=DEFAULT_TIMEOUT_MS,
    )
    if reply is None:
        raise ManagedObjectsError("empty reply")
    if not isinstance(reply, dict):
        raise ManagedObjectsError(f"expected a{{oa{{sa{{sv}}}}}}, got {type(reply).__name__}")

    objects = []
    for path, interfaces in reply.items():
        if not isinstance(interfaces, dict):
            raise ManagedObjectsError(f"interfaces of {path} are {type(interfaces).__name__}")
        objects.append((str(path), interfaces))
    return objects


def list_adapters(conn) -> List[str]:
    """Return the paths of every object that publishes the adapter interface."""
    return [path for path, interfaces in get_managed_objects(conn) if ADAPTER_INTERFACE in interfaces]


def list_children(conn, child_interface: str, parent_path: str,
                  parent_property_name: Optional[str] = None) -> List[str]:
    """Return paths implementing *child_interface* whose parent is *parent_path*.

    The parent link is read from the managed-objects payload; if the daemon
    left it out the property is fetched individually.
    """
    if parent_property_name is None:
        parent_property_name = PARENT_PROPERTY[child_interface]

    children = []
    for path, interfaces in get_managed_objects(conn):
        if child_interface not in interfaces:
            continue
        props = interfaces[child_interface]
        if parent_property_name in props:
            parent = props[parent_property_name]
        else:
            parent = get_property(conn, child_interface, path, parent_property_name)
        if to_path(parent, f"{path} {parent_property_name}") == parent_path:
            children.append(path)
    return children


def list_devices(conn, adapter_path: str) -> List[str]:
    return list_children(conn, DEVICE_INTERFACE, adapter_path, "Adapter")


def list_services(conn, device_path: str) -> List[str]:
    return list_children(conn, GATT_SERVICE_INTERFACE, device_path, "Device")


def list_characteristics(conn, service_path: str) -> List[str]:
    return list_children(conn, GATT_CHARACTERISTIC_INTERFACE, service_path, "Service")


def list_descriptors(conn, characteristic_path: str) -> List[str]:
    return list_children(conn, GATT_DESCRIPTOR_INTERFACE, characteristic_path, "Characteristic")


def gatt_value_options(offset: Optional[int] = None) -> dbus.Dictionary:
    """Options for GATT ``ReadValue``/``WriteValue``; ``offset`` is a u16."""
    options: Dict[str, Any] = {}
    if offset is not None:
        options["offset"] = dbus.UInt16(offset)
    return dbus.Dictionary(options, signature="sv")
