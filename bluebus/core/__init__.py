"""
Core package initialisation for bluebus.

Deliberately kept lightweight: only configuration, logging and the error
taxonomy live here, none of which touch the bus.
"""

from bluebus.core.errors import (
    BluebusError,
    BusError,
    AdapterNotFoundError,
    NoDeviceFoundError,
    DeprecatedFeatureError,
    NotImplementedFeatureError,
    FailedToGetStatusError,
    UnknownError,
)

__all__ = [
    "BluebusError",
    "BusError",
    "AdapterNotFoundError",
    "NoDeviceFoundError",
    "DeprecatedFeatureError",
    "NotImplementedFeatureError",
    "FailedToGetStatusError",
    "UnknownError",
]
