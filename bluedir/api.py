"""Public import surface of bluedir.

Library callers open a :class:`Session` on a backend identifier, scan, and
then work with devices by name prefix. Everything needed for that, plus the
error classes and the tree decoder, is re-exported here.
"""

from __future__ import annotations

from bluedir.backends.base import Backend, BusClient
from bluedir.backends.bus import BusBackend
from bluedir.backends.shell import ShellBackend
from bluedir.core.config import Settings, load_settings
from bluedir.core.directory import DeviceDirectory
from bluedir.core.errors import (
    AdapterNotFoundError,
    BackendNotFoundError,
    BackendOpenError,
    BluedirError,
    ConfigError,
    DecodeError,
    RemoteCallError,
    TransportConnectError,
    TransportError,
    TransportTimeoutError,
)
from bluedir.core.model import DEVNAME_MAXLEN, Device
from bluedir.core.registry import BACKENDS, BackendEntry, lookup_backend
from bluedir.core.session import ErrorCode, Session, SessionState
from bluedir.core.tree import DecodedTree, decode_tree, resolve_adapter

__all__ = [
    "AdapterNotFoundError",
    "BackendNotFoundError",
    "BackendOpenError",
    "BluedirError",
    "ConfigError",
    "DecodeError",
    "RemoteCallError",
    "TransportConnectError",
    "TransportError",
    "TransportTimeoutError",
    "Backend",
    "BackendEntry",
    "BACKENDS",
    "BusBackend",
    "BusClient",
    "DecodedTree",
    "Device",
    "DeviceDirectory",
    "DEVNAME_MAXLEN",
    "ErrorCode",
    "Session",
    "SessionState",
    "Settings",
    "ShellBackend",
    "decode_tree",
    "load_settings",
    "lookup_backend",
    "resolve_adapter",
]
