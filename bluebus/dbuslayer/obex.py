"""bluebus.dbuslayer.obex – Object Push through the BlueZ *obexd* D-Bus API.

obexd lives on the *session* bus, so the :class:`~bluebus.dbuslayer.session.Session`
passed here should come from :meth:`Session.create_obex`.

Completion of a transfer is detected by polling ``Transfer1.Status``; the
interval defaults to ``config.settings.obex_poll_interval`` and never exceeds
one second.  ``PropertiesChanged`` on the transfer object is not used.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable, Optional, Union

import dbus

from bluebus.bt_ref.constants import (
    DEFAULT_TIMEOUT_MS,
    OBEX_CLIENT_INTERFACE,
    OBEX_CLIENT_PATH,
    OBEX_OBJECT_PUSH_INTERFACE,
    OBEX_SERVICE_NAME,
    OBEX_TRANSFER_INTERFACE,
)
from bluebus.core import config
from bluebus.core.errors import BluebusError, FailedToGetStatusError
from bluebus.core.log import get_logger, logging__obex_log
from bluebus.dbuslayer import bus
from bluebus.dbuslayer.proxy import BluezObject

logger = get_logger(__name__)

__all__ = ["SessionTarget", "TransferState", "ObexSession", "ObexTransfer"]


class SessionTarget(str, Enum):
    """``Target`` values accepted by ``Client1.CreateSession``."""

    FTP = "ftp"
    MAP = "map"
    OPP = "opp"
    PBAP = "pbap"
    SYNC = "sync"


class TransferState(str, Enum):
    QUEUED = "queued"
    ACTIVE = "active"
    COMPLETE = "complete"
    SUSPENDED = "suspended"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (TransferState.COMPLETE, TransferState.ERROR)


class ObexTransfer(BluezObject):
    """One file transfer spawned by an OBEX session."""

    INTERFACE = OBEX_TRANSFER_INTERFACE
    SERVICE = OBEX_SERVICE_NAME

    def __init__(self, session, object_path: str, filename: Optional[str] = None):
        super().__init__(session, object_path)
        self.filename = filename

    def status(self) -> TransferState:
        raw = self.get_property("Status")
        if not isinstance(raw, dbus.String):
            raise FailedToGetStatusError(raw)
        try:
            return TransferState(str(raw))
        except ValueError:
            raise FailedToGetStatusError(str(raw)) from None

    def get_name(self) -> str:
        return self._get_str("Name")

    def get_size(self) -> int:
        return self._get_int("Size", "u64")

    def get_transferred(self) -> int:
        return self._get_int("Transferred", "u64")

    def get_filename(self) -> str:
        return self._get_str("Filename")

    def cancel(self) -> None:
        self.call_method("Cancel", timeout_ms=DEFAULT_TIMEOUT_MS)

    def suspend(self) -> None:
        self.call_method("Suspend", timeout_ms=DEFAULT_TIMEOUT_MS)

    def resume(self) -> None:
        self.call_method("Resume", timeout_ms=DEFAULT_TIMEOUT_MS)

    def wait_until_complete(
        self,
        poll_interval: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Block until the transfer reaches ``complete`` or ``error``.

        Never raises: a failed status read ends the wait as well, so check
        :meth:`status` afterwards when the outcome matters.
        """
        if poll_interval is None:
            poll_interval = config.settings.obex_poll_interval
        poll_interval = config.clamp_poll_interval(poll_interval)

        previous = None
        while True:
            try:
                state = self.status()
            except BluebusError as exc:
                logging__obex_log(f"[-] {self.object_path}: status unavailable ({exc}), giving up")
                return
            if state is not previous:
                logging__obex_log(f"[*] {self.object_path}: {state.value}")
                previous = state
            if state.is_terminal:
                return
            sleep(poll_interval)


class ObexSession(BluezObject):
    """An obexd client session bound to one remote device."""

    INTERFACE = OBEX_OBJECT_PUSH_INTERFACE
    SERVICE = OBEX_SERVICE_NAME

    @classmethod
    def create(
        cls,
        session,
        device: Union[str, "BluezObject"],
        target: SessionTarget = SessionTarget.OPP,
    ) -> "ObexSession":
        """Open a session to *device* (a :class:`Device` or a MAC address)."""
        address = device.get_address() if hasattr(device, "get_address") else str(device)
        address = address.strip().upper()
        options = dbus.Dictionary({"Target": dbus.String(SessionTarget(target).value)}, signature="sv")
        reply = bus.call_method_1(
            session.get_connection(),
            OBEX_CLIENT_INTERFACE,
            OBEX_CLIENT_PATH,
            "CreateSession",
            (dbus.String(address), options),
            DEFAULT_TIMEOUT_MS,
            signature="sa{sv}",
            service=OBEX_SERVICE_NAME,
        )
        path = bus.to_path(reply, "CreateSession")
        logging__obex_log(f"[+] OBEX {SessionTarget(target).value} session {path} to {address}")
        return cls(session, path)

    def remove(self) -> None:
        bus.call_method(
            self._conn,
            OBEX_CLIENT_INTERFACE,
            OBEX_CLIENT_PATH,
            "RemoveSession",
            (dbus.ObjectPath(self.object_path),),
            DEFAULT_TIMEOUT_MS,
            signature="o",
            service=OBEX_SERVICE_NAME,
        )
        logging__obex_log(f"[-] OBEX session {self.object_path} removed")

    def send_file(self, file_path: str) -> ObexTransfer:
        """Queue *file_path* for Object Push and return its transfer."""
        # Reply is (transfer path, initial transfer properties)
        transfer, _props = bus.call_method_2(
            self._conn,
            self.INTERFACE,
            self.object_path,
            "SendFile",
            (dbus.String(file_path),),
            DEFAULT_TIMEOUT_MS,
            signature="s",
            service=self.SERVICE,
        )
        transfer_path = bus.to_path(transfer, self._what("SendFile"))
        logging__obex_log(f"[*] Sending {file_path} as {transfer_path}")
        return ObexTransfer(self.session, transfer_path, file_path)

    def __enter__(self) -> "ObexSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.remove()
