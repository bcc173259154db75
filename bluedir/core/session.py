"""Session facade owning the single active backend."""

from __future__ import annotations

import enum
import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass

from bluedir.backends.base import Backend
from bluedir.core.config import Settings, load_settings
from bluedir.core.errors import BluedirError, ConfigError
from bluedir.core.model import Device
from bluedir.core.registry import BACKENDS, BackendEntry, lookup_backend

LOGGER = logging.getLogger(__name__)

ERRMSG_MAXLEN = 128
_STRERROR_MAXLEN = 64


class ErrorCode(enum.IntEnum):
    OK = 0
    OPEN = -1


class SessionState(enum.Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


@dataclass
class ErrorState:
    message: str = ""
    errno: int = 0

    def render(self) -> str:
        text = self.message[: ERRMSG_MAXLEN - 1]
        if self.errno:
            reason = os.strerror(self.errno)[: _STRERROR_MAXLEN - 1]
            text = f"{text}: {reason} [errno {self.errno}]"
        return text[: ERRMSG_MAXLEN - 1]


class Session:
    """Forwards device operations to exactly one open backend.

    Operations called before a successful ``open`` or after ``close`` return
    harmless defaults. Backend failures are recorded for ``errmsg()`` and
    turned into the same defaults; the error state is never cleared on
    success, so an empty message does not imply the last call worked.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        backends: Sequence[BackendEntry] = BACKENDS,
    ) -> None:
        self._config_error: ConfigError | None = None
        if settings is None:
            try:
                settings = load_settings()
            except ConfigError as exc:
                # Reported by the next open().
                self._config_error = exc
                settings = Settings()
        self.settings = settings
        self._backends = tuple(backends)
        self._state = SessionState.UNOPENED
        self._entry: BackendEntry | None = None
        self._backend: Backend | None = None
        self._error = ErrorState()

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def backend_ident(self) -> str | None:
        return self._entry.ident if self._entry else None

    def errmsg(self) -> str:
        return self._error.render()

    def open(self, identifier: str | None) -> int:
        if self._state is SessionState.OPEN:
            return self._fail(ErrorCode.OPEN, "Bluetooth backend already open")
        if self._state is SessionState.CLOSED:
            return self._fail(ErrorCode.OPEN, "Bluetooth session already closed")
        if not identifier:
            return self._fail(ErrorCode.OPEN, "Bluetooth backend param invalid")
        if self._config_error is not None:
            exc = self._config_error
            return self._fail(ErrorCode.OPEN, str(exc), errno=exc.errno)

        try:
            entry = lookup_backend(identifier, self._backends)
            backend = entry.init(self.settings)
        except BluedirError as exc:
            return self._fail(ErrorCode.OPEN, str(exc), errno=exc.errno)
        if backend is None:
            return self._fail(ErrorCode.OPEN, f"Bluetooth backend {entry.ident} init failed")

        self._entry = entry
        self._backend = backend
        self._state = SessionState.OPEN
        LOGGER.debug("Opened backend %s", entry.ident)
        return ErrorCode.OK

    def close(self) -> None:
        if self._state is not SessionState.OPEN or self._backend is None:
            return
        backend, self._backend = self._backend, None
        self._state = SessionState.CLOSED
        try:
            backend.free()
        except BluedirError as exc:
            self._record(exc)
        LOGGER.debug("Closed backend %s", self.backend_ident)

    def scan(self, timeout: int | None = None) -> None:
        if self._backend is None:
            return
        if timeout is None:
            timeout = self.settings.scan_timeout
        try:
            self._backend.scan(timeout)
        except BluedirError as exc:
            self._record(exc)

    def get_devices(self, max_count: int) -> list[str]:
        if self._backend is None or max_count <= 0:
            return []
        try:
            return self._backend.get_devices(max_count)[:max_count]
        except BluedirError as exc:
            self._record(exc)
            return []

    def list_devices(self) -> tuple[Device, ...]:
        if self._backend is None:
            return ()
        return self._backend.directory.devices

    def is_connected(self, identity: str) -> bool:
        if self._backend is None:
            return False
        try:
            return self._backend.is_connected(identity)
        except BluedirError as exc:
            self._record(exc)
            return False

    def connect(self, identity: str, timeout: int = 0) -> bool:
        if self._backend is None:
            return False
        try:
            return self._backend.connect(identity, timeout)
        except BluedirError as exc:
            self._record(exc)
            return False

    def disconnect(self, identity: str, timeout: int = 0) -> bool:
        if self._backend is None:
            return False
        try:
            return self._backend.disconnect(identity, timeout)
        except BluedirError as exc:
            self._record(exc)
            return False

    def _record(self, exc: BluedirError) -> None:
        self._error = ErrorState(message=str(exc), errno=exc.errno)
        LOGGER.debug("%s", self._error.render())

    def _fail(self, code: ErrorCode, message: str, *, errno: int = 0) -> int:
        self._error = ErrorState(message=message, errno=errno)
        LOGGER.debug("%s", self._error.render())
        return code
