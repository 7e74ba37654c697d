"""Shared plumbing for the BlueZ proxy classes.

A proxy is only an object path plus a borrowed :class:`Session`; all state
lives in the daemon and is fetched on every call.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from bluebus.bt_ref.constants import BLUEZ_SERVICE_NAME, DEFAULT_TIMEOUT_MS
from bluebus.dbuslayer import bus


class BluezObject:
    """Base for every path-addressed proxy."""

    INTERFACE: str = ""
    SERVICE: str = BLUEZ_SERVICE_NAME

    def __init__(self, session, object_path: str):
        self.session = session
        self.object_path = str(object_path)

    def get_id(self) -> str:
        return self.object_path

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.object_path == self.object_path  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.object_path))

    def __repr__(self) -> str:  # pragma: no cover – debugging aid
        return f"{type(self).__name__}({self.object_path!r})"

    # ------------------------------------------------------------------
    # D-Bus helpers
    # ------------------------------------------------------------------
    @property
    def _conn(self):
        return self.session.get_connection()

    def _what(self, name: str) -> str:
        return f"{self.object_path} {self.INTERFACE}.{name}"

    def get_property(self, name: str) -> Any:
        """Raw D-Bus typed value of *name*."""
        return bus.get_property(self._conn, self.INTERFACE, self.object_path, name, service=self.SERVICE)

    def set_property(self, name: str, value: Any, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> None:
        bus.set_property(self._conn, self.INTERFACE, self.object_path, name, value, timeout_ms, service=self.SERVICE)

    def call_method(self, method: str, args: Sequence[Any] = (), timeout_ms: int = DEFAULT_TIMEOUT_MS,
                    signature: Optional[str] = None) -> Any:
        return bus.call_method(
            self._conn,
            self.INTERFACE,
            self.object_path,
            method,
            args,
            timeout_ms,
            signature=signature,
            service=self.SERVICE,
        )

    def _get_bool(self, name: str) -> bool:
        return bus.to_bool(self.get_property(name), self._what(name))

    def _get_int(self, name: str, kind: str) -> int:
        return bus.to_int(self.get_property(name), kind, self._what(name))

    def _get_str(self, name: str) -> str:
        return bus.to_str(self.get_property(name), self._what(name))

    def _get_path(self, name: str) -> str:
        return bus.to_path(self.get_property(name), self._what(name))

    def _get_str_list(self, name: str) -> list:
        return bus.to_str_list(self.get_property(name), self._what(name))

    def _get_bytes(self, name: str) -> bytes:
        return bus.to_bytes(self.get_property(name), self._what(name))
