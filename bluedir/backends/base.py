"""Backend and bus client interfaces."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from bluedir.core.config import Settings
from bluedir.core.directory import DeviceDirectory

MIN_TIMEOUT_S = 1


def normalize_timeout(timeout: int) -> int:
    """Clamp a timeout so it never opens a zero-length window."""
    return max(int(timeout), MIN_TIMEOUT_S)


class Backend(Protocol):
    directory: DeviceDirectory

    @classmethod
    def init(cls, settings: Settings) -> Backend | None:
        """Probe the underlying tool or service; return None when unreachable."""

    def free(self) -> None:
        """Release device records and any held connection."""

    def scan(self, timeout: int) -> None:
        """Run discovery for ``timeout`` seconds and rebuild the directory."""

    def get_devices(self, max_count: int) -> list[str]:
        """Return up to ``max_count`` display names in directory order."""

    def is_connected(self, identity: str) -> bool:
        """Return live connection state of the first name-prefix match."""

    def connect(self, identity: str, timeout: int) -> bool:
        """Issue a connect; True means issued, not that the link is up."""

    def disconnect(self, identity: str, timeout: int) -> bool:
        """Issue a disconnect; True means issued, not that the link is down."""


class BusClient(Protocol):
    def connect(self) -> None:
        """Open the bus connection."""

    def close(self) -> None:
        """Close the bus connection; safe to call more than once."""

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
        """Make a blocking method call and return the reply body."""

    def name_has_owner(self, name: str, *, timeout_ms: int) -> bool:
        """Return True when ``name`` is currently owned on the bus."""

    def get_property(self, path: str, interface: str, name: str, *, timeout_ms: int) -> Any:
        """Read one property through org.freedesktop.DBus.Properties."""

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
        """Write one property through org.freedesktop.DBus.Properties."""
