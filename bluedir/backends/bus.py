"""BlueZ backend speaking to the object manager over the system bus."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from bluedir.backends.base import BusClient, normalize_timeout
from bluedir.backends.dbus_client import DBusNextClient
from bluedir.core.config import Settings
from bluedir.core.directory import DeviceDirectory
from bluedir.core.errors import (
    AdapterNotFoundError,
    BluedirError,
    DecodeError,
    RemoteCallError,
)
from bluedir.core.tree import decode_tree, resolve_adapter

LOGGER = logging.getLogger(__name__)

OBJECT_MANAGER_INTERFACE = "org.freedesktop.DBus.ObjectManager"


class BusBackend:
    ident = "bluez"

    def __init__(self, client: BusClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings
        self.adapter: str | None = None
        self.directory = DeviceDirectory()

    @classmethod
    def init(
        cls,
        settings: Settings,
        client_factory: Callable[[str], BusClient] | None = None,
    ) -> BusBackend | None:
        client = (client_factory or DBusNextClient)(settings.bus_service)
        try:
            client.connect()
            owned = client.name_has_owner(settings.bus_service, timeout_ms=settings.call_timeout_ms)
        except BluedirError as exc:
            LOGGER.warning("System bus probe failed: %s", exc)
            client.close()
            return None
        if not owned:
            LOGGER.warning("Service %s is not running on the system bus", settings.bus_service)
            client.close()
            return None
        return cls(client, settings)

    def free(self) -> None:
        self.directory = DeviceDirectory()
        self.adapter = None
        self._client.close()

    def scan(self, timeout: int) -> None:
        timeout = normalize_timeout(timeout)

        if self.adapter is None:
            adapter = resolve_adapter(self._managed_objects(), self._settings.adapter_interface)
            if adapter is None:
                raise AdapterNotFoundError("No Bluetooth adapter found")
            self.adapter = adapter
            LOGGER.debug("Using adapter %s", adapter)

        self._client.set_property(
            self.adapter,
            self._settings.adapter_interface,
            "Powered",
            "b",
            True,
            timeout_ms=self._settings.call_timeout_ms,
        )
        self._discovery(self.adapter, "StartDiscovery")
        time.sleep(timeout)
        self._discovery(self.adapter, "StopDiscovery")

        decoded = decode_tree(
            self._managed_objects(),
            adapter_selector=self._settings.adapter_interface,
            device_selector=self._settings.device_interface,
        )
        directory = DeviceDirectory(decoded.devices)
        self.directory = directory
        LOGGER.info("Scan found %d device(s)", len(directory))

    def get_devices(self, max_count: int) -> list[str]:
        return self.directory.names(max_count)

    def is_connected(self, identity: str) -> bool:
        device = self.directory.find(identity)
        if device is None:
            return False

        value = self._client.get_property(
            device.key,
            self._settings.device_interface,
            "Connected",
            timeout_ms=self._settings.call_timeout_ms,
        )
        if not isinstance(value, bool):
            raise DecodeError(
                f"Object {device.key}: Connected must be a boolean, got {type(value).__name__}"
            )
        return value

    def connect(self, identity: str, timeout: int) -> bool:
        if self.is_connected(identity):
            return True

        device = self.directory.find(identity)
        if device is None:
            return False

        timeout_ms = normalize_timeout(timeout) * 1000
        if self.adapter is not None:
            self._tolerate_remote(
                "Pairable",
                self._client.set_property,
                self.adapter,
                self._settings.adapter_interface,
                "Pairable",
                "b",
                True,
                timeout_ms=self._settings.call_timeout_ms,
            )
        if device.paired is not True:
            self._tolerate_remote(
                "Pair",
                self._client.call,
                device.key,
                self._settings.device_interface,
                "Pair",
                timeout_ms=timeout_ms,
            )
        self._tolerate_remote(
            "Trusted",
            self._client.set_property,
            device.key,
            self._settings.device_interface,
            "Trusted",
            "b",
            True,
            timeout_ms=self._settings.call_timeout_ms,
        )
        self._tolerate_remote(
            "Connect",
            self._client.call,
            device.key,
            self._settings.device_interface,
            "Connect",
            timeout_ms=timeout_ms,
        )
        return True

    def disconnect(self, identity: str, timeout: int) -> bool:
        if not self.is_connected(identity):
            return True

        device = self.directory.find(identity)
        if device is None:
            return False

        self._tolerate_remote(
            "Disconnect",
            self._client.call,
            device.key,
            self._settings.device_interface,
            "Disconnect",
            timeout_ms=normalize_timeout(timeout) * 1000,
        )
        return True

    def _managed_objects(self) -> Any:
        body = self._client.call(
            "/",
            OBJECT_MANAGER_INTERFACE,
            "GetManagedObjects",
            timeout_ms=self._settings.call_timeout_ms,
        )
        if not body:
            raise DecodeError("GetManagedObjects returned an empty reply")
        return body[0]

    def _discovery(self, adapter: str, method: str) -> None:
        self._tolerate_remote(
            method,
            self._client.call,
            adapter,
            self._settings.adapter_interface,
            method,
            timeout_ms=self._settings.call_timeout_ms,
        )

    @staticmethod
    def _tolerate_remote(what: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """Run a bus call whose error reply still counts as issued.

        Transport failures propagate; only service-side refusals such as
        ``org.bluez.Error.AlreadyExists`` or ``InProgress`` are logged.
        """
        try:
            fn(*args, **kwargs)
        except RemoteCallError as exc:
            LOGGER.warning("%s answered with %s", what, exc)
