"""Bus session: owns one D-Bus connection and pumps incoming signals.

Each :class:`Session` opens a *private* connection so that match rules and
message filters stay local to it; proxies borrow the connection through
:meth:`Session.get_connection`.  Signals are only delivered while
:meth:`Session.incoming` is driving the GLib main loop.
"""

from __future__ import annotations

from typing import Callable, Optional

import dbus
import dbus.lowlevel
import dbus.mainloop.glib
from gi.repository import GLib

from bluebus.bt_ref.constants import DBUS_LOCAL_IFACE
from bluebus.bt_ref.utils import build_match_rule
from bluebus.core.errors import BusError, map_dbus_error
from bluebus.core.log import get_logger, logging__signal_log

logger = get_logger(__name__)

__all__ = ["Session"]


class Session:
    """Lifetime root for every proxy created on top of it."""

    def __init__(self, connection, match_rule: Optional[str] = None):
        self._connection = connection
        self.match_rule = match_rule

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def create(cls, filter_path: Optional[str] = None) -> "Session":
        """Open a system-bus connection listening to BlueZ signals.

        With *filter_path* only signals emitted by that object are matched.
        """
        rule = build_match_rule(filter_path)
        try:
            connection = dbus.SystemBus(mainloop=dbus.mainloop.glib.DBusGMainLoop(), private=True)
        except dbus.exceptions.DBusException as e:
            logger.error(f"Failed to open BlueZ session: {e}")
            raise map_dbus_error(e) from e
        try:
            connection.add_match_string(rule)
        except dbus.exceptions.DBusException as e:
            # Private connections are never reclaimed by dbus-python
            connection.close()
            logger.error(f"Match rule {rule} rejected: {e}")
            raise map_dbus_error(e) from e
        logger.debug(f"Session opened with match rule {rule}")
        return cls(connection, rule)

    @classmethod
    def create_obex(cls) -> "Session":
        """Open a session-bus connection, where obexd publishes its objects."""
        try:
            connection = dbus.SessionBus(mainloop=dbus.mainloop.glib.DBusGMainLoop(), private=True)
        except dbus.exceptions.DBusException as e:
            logger.error(f"Failed to open OBEX session: {e}")
            raise map_dbus_error(e) from e
        return cls(connection)

    def get_connection(self):
        return self._connection

    def close(self) -> None:
        """Close the private connection; proxies become unusable."""
        close = getattr(self._connection, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:  # pragma: no cover – debugging aid
        return f"Session(match_rule={self.match_rule!r})"

    # ------------------------------------------------------------------
    # Signal delivery
    # ------------------------------------------------------------------
    def incoming(self, timeout_ms: int, callback: Callable) -> None:
        """Feed every incoming signal to *callback* for *timeout_ms* ms.

        The callback runs synchronously on this thread.  If it raises, the
        window closes early and the exception propagates.  A dropped bus
        connection ends the window with :class:`BusError`.
        """
        loop = GLib.MainLoop()
        failure: list = []
        state = {"timer": None}

        def _stop() -> None:
            if loop.is_running():
                loop.quit()

        def _filter(_connection, message):
            if message.get_type() != dbus.lowlevel.MESSAGE_TYPE_SIGNAL:
                return dbus.lowlevel.HANDLER_RESULT_NOT_YET_HANDLED
            if message.get_interface() == DBUS_LOCAL_IFACE and message.get_member() == "Disconnected":
                failure.append(BusError("connection closed by the bus"))
                _stop()
                return dbus.lowlevel.HANDLER_RESULT_NOT_YET_HANDLED
            if failure:
                return dbus.lowlevel.HANDLER_RESULT_NOT_YET_HANDLED
            logging__signal_log(
                f"signal {message.get_path()} {message.get_interface()}.{message.get_member()}"
            )
            try:
                callback(message)
            except Exception as exc:  # noqa: BLE001 – re-raised after the loop
                failure.append(exc)
                _stop()
            return dbus.lowlevel.HANDLER_RESULT_NOT_YET_HANDLED

        def _on_timeout() -> bool:
            state["timer"] = None
            _stop()
            return False

        self._connection.add_message_filter(_filter)
        state["timer"] = GLib.timeout_add(int(timeout_ms), _on_timeout)
        try:
            if not failure:
                loop.run()
        finally:
            if state["timer"] is not None:
                GLib.source_remove(state["timer"])
            self._connection.remove_message_filter(_filter)

        if failure:
            raise failure[0]

    def incoming_events(self, timeout_ms: int, callback: Callable) -> None:
        """Like :meth:`incoming` but hands *callback* decoded events only."""
        from bluebus.dbuslayer.events import decode_all

        def _decode(message) -> None:
            for event in decode_all(message):
                callback(event)

        self.incoming(timeout_ms, _decode)
