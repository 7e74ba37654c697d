"""
Core constants for bluebus.

This module provides centralized constants for the BlueZ D-Bus surface, organized by category.
"""

# D-Bus Core Constants
DBUS_PROPERTIES = "org.freedesktop.DBus.Properties"
DBUS_OM_IFACE = "org.freedesktop.DBus.ObjectManager"
DBUS_LOCAL_IFACE = "org.freedesktop.DBus.Local"
DBUS_ROOT_PATH = "/"

# BlueZ Core Constants
BLUEZ_SERVICE_NAME = "org.bluez"

# Signal match rule; a path clause is appended when a Session is narrowed
BLUEZ_MATCH_RULE = "type='signal',sender='org.bluez'"

# BlueZ Interface Constants
ADAPTER_INTERFACE = BLUEZ_SERVICE_NAME + ".Adapter1"
DEVICE_INTERFACE = BLUEZ_SERVICE_NAME + ".Device1"

# GATT Interface Constants
GATT_SERVICE_INTERFACE = BLUEZ_SERVICE_NAME + ".GattService1"
GATT_CHARACTERISTIC_INTERFACE = BLUEZ_SERVICE_NAME + ".GattCharacteristic1"
GATT_DESCRIPTOR_INTERFACE = BLUEZ_SERVICE_NAME + ".GattDescriptor1"

# OBEX Constants (obexd lives on the session bus)
OBEX_SERVICE_NAME = "org.bluez.obex"
OBEX_CLIENT_PATH = "/org/bluez/obex"
OBEX_CLIENT_INTERFACE = OBEX_SERVICE_NAME + ".Client1"
OBEX_OBJECT_PUSH_INTERFACE = OBEX_SERVICE_NAME + ".ObjectPush1"
OBEX_TRANSFER_INTERFACE = OBEX_SERVICE_NAME + ".Transfer1"

# Parent property linking each child interface to the object above it
PARENT_PROPERTY = {
    DEVICE_INTERFACE: "Adapter",
    GATT_SERVICE_INTERFACE: "Device",
    GATT_CHARACTERISTIC_INTERFACE: "Service",
    GATT_DESCRIPTOR_INTERFACE: "Characteristic",
}

# Timeouts (milliseconds)
DEFAULT_TIMEOUT_MS = 1000
PROPERTY_TIMEOUT_MS = 1000
POWERED_TIMEOUT_MS = 10000
CONNECT_TIMEOUT_MS = 10000
PAIR_TIMEOUT_MS = 60000
PROFILE_TIMEOUT_MS = 10000
GATT_WRITE_TIMEOUT_MS = 10000

# OBEX transfer polling (seconds)
OBEX_POLL_INTERVAL = 0.5
OBEX_POLL_INTERVAL_MAX = 1.0

# Result/Error Codes
RESULT_ERR = 1
RESULT_ERR_NOT_CONNECTED = 2
RESULT_ERR_NOT_SUPPORTED = 3
RESULT_ERR_ACCESS_DENIED = 6
RESULT_EXCEPTION = 7
RESULT_ERR_BAD_ARGS = 8
RESULT_ERR_NOT_FOUND = 9
RESULT_ERR_METHOD_SIGNATURE_NOT_EXIST = 10
RESULT_ERR_NO_DEVICES_FOUND = 11
RESULT_ERR_NO_ADAPTER_FOUND = 12
RESULT_ERR_READ_NOT_PERMITTED = 13
RESULT_ERR_NO_REPLY = 14
RESULT_ERR_DEPRECATED = 15
RESULT_ERR_ACTION_IN_PROGRESS = 16
RESULT_ERR_UNKNOWN_SERVCE = 17
RESULT_ERR_UNKNOWN_OBJECT = 18
RESULT_ERR_NOT_IMPLEMENTED = 19
RESULT_ERR_UNKNOWN_CONNECT_FAILURE = 20
RESULT_ERR_BAD_REPLY = 21
RESULT_ERR_NOT_PERMITTED = 22
RESULT_ERR_NOT_AUTHORIZED = 23
RESULT_ERR_WRITE_NOT_PERMITTED = 24
RESULT_ERR_NOTIFY_NOT_PERMITTED = 25
RESULT_ERR_TRANSFER_STATUS = 26

