"""Blocking system bus client built on dbus-next."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from dbus_next import BusType, Message, MessageType, Variant
from dbus_next.aio import MessageBus

from bluedir.core.errors import (
    RemoteCallError,
    TransportConnectError,
    TransportError,
    TransportTimeoutError,
)

LOGGER = logging.getLogger(__name__)

BUS_DAEMON_SERVICE = "org.freedesktop.DBus"
BUS_DAEMON_PATH = "/org/freedesktop/DBus"
PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"


class DBusNextClient:
    """Synchronous facade over ``dbus_next.aio.MessageBus``.

    The client owns a private event loop that only runs while one of its
    methods is blocking, so callers see plain blocking calls.
    """

    def __init__(self, service: str = "org.bluez", *, bus_type: BusType = BusType.SYSTEM) -> None:
        self._service = service
        self._bus_type = bus_type
        self._loop: asyncio.AbstractEventLoop | None = None
        self._bus: MessageBus | None = None

    def connect(self) -> None:
        if self._bus is not None:
            return
        loop = asyncio.new_event_loop()

        async def _connect() -> MessageBus:
            return await MessageBus(bus_type=self._bus_type).connect()

        try:
            self._bus = loop.run_until_complete(_connect())
        except Exception as exc:
            loop.close()
            raise TransportConnectError(
                f"Could not connect to the system bus: {exc}",
                errno=getattr(exc, "errno", None) or 0,
            ) from exc
        self._loop = loop
        LOGGER.debug("Connected to the %s bus", self._bus_type.name.lower())

    def close(self) -> None:
        bus, loop = self._bus, self._loop
        self._bus = None
        self._loop = None
        if bus is not None and loop is not None:
            bus.disconnect()
            try:
                loop.run_until_complete(bus.wait_for_disconnect())
            except Exception as exc:
                LOGGER.debug("Bus disconnect reported: %s", exc)
        if loop is not None:
            loop.close()

    def call(
        self,
        path: str,
        interface: str,
        member: str,
        *,
        signature: str = "",
        body: Sequence[Any] = (),
        timeout_ms: int,
        destination: str | None = None,
    ) -> list[Any]:
        if self._bus is None or self._loop is None:
            raise TransportError("System bus connection is not open")

        message = Message(
            destination=destination or self._service,
            path=path,
            interface=interface,
            member=member,
            signature=signature,
            body=list(body),
        )
        timeout_s = timeout_ms / 1000 if timeout_ms > 0 else None
        LOGGER.debug("Calling %s.%s on %s", interface, member, path)

        try:
            reply = self._loop.run_until_complete(
                asyncio.wait_for(self._bus.call(message), timeout=timeout_s)
            )
        except asyncio.TimeoutError as exc:
            raise TransportTimeoutError(
                f"No reply to {interface}.{member} on {path} within {timeout_ms} ms"
            ) from exc
        except Exception as exc:
            raise TransportError(f"Bus call {interface}.{member} on {path} failed: {exc}") from exc

        if reply is None:
            raise TransportError(f"No reply to {interface}.{member} on {path}")
        if reply.message_type == MessageType.ERROR:
            detail = reply.body[0] if reply.body and isinstance(reply.body[0], str) else ""
            raise RemoteCallError(reply.error_name or "org.freedesktop.DBus.Error.Failed", detail)
        return list(reply.body)

    def name_has_owner(self, name: str, *, timeout_ms: int) -> bool:
        body = self.call(
            BUS_DAEMON_PATH,
            BUS_DAEMON_SERVICE,
            "NameHasOwner",
            signature="s",
            body=[name],
            timeout_ms=timeout_ms,
            destination=BUS_DAEMON_SERVICE,
        )
        return bool(body and body[0])

    def get_property(self, path: str, interface: str, name: str, *, timeout_ms: int) -> Any:
        body = self.call(
            path,
            PROPERTIES_INTERFACE,
            "Get",
            signature="ss",
            body=[interface, name],
            timeout_ms=timeout_ms,
        )
        if not body:
            raise TransportError(f"Empty reply reading {interface}.{name} on {path}")
        value = body[0]
        return value.value if isinstance(value, Variant) else value

    def set_property(
        self,
        path: str,
        interface: str,
        name: str,
        signature: str,
        value: Any,
        *,
        timeout_ms: int,
    ) -> None:
        self.call(
            path,
            PROPERTIES_INTERFACE,
            "Set",
            signature="ssv",
            body=[interface, name, Variant(signature, value)],
            timeout_ms=timeout_ms,
        )
