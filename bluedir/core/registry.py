"""Static table of available backends."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from bluedir.backends.base import Backend
from bluedir.backends.bus import BusBackend
from bluedir.backends.shell import ShellBackend
from bluedir.core.config import Settings
from bluedir.core.errors import BackendNotFoundError


@dataclass(frozen=True)
class BackendEntry:
    ident: str
    init: Callable[[Settings], Backend | None]


BACKENDS: tuple[BackendEntry, ...] = (
    BackendEntry(ident=ShellBackend.ident, init=ShellBackend.init),
    BackendEntry(ident=BusBackend.ident, init=BusBackend.init),
)


def lookup_backend(identifier: str, backends: Sequence[BackendEntry] = BACKENDS) -> BackendEntry:
    """Return the first entry whose identifier starts with ``identifier``."""
    for entry in backends:
        if entry.ident.startswith(identifier):
            return entry
    raise BackendNotFoundError(f"Bluetooth backend {identifier} not found")
