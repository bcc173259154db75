"""bluetoothctl backend driven through subprocess calls."""

from __future__ import annotations

import logging
import re
import subprocess

from bluedir.backends.base import normalize_timeout
from bluedir.core.config import Settings
from bluedir.core.directory import DeviceDirectory
from bluedir.core.errors import TransportError
from bluedir.core.model import Device

LOGGER = logging.getLogger(__name__)

_DEVICE_LINE_RE = re.compile(r"^Device\s+(\S+)(?:\s+(.*))?$")
_CONNECTED_MARKER = "Connected: yes"


def parse_device_lines(output: str) -> list[Device]:
    """Parse ``Device <address> <name>`` lines from a device listing."""
    devices: list[Device] = []
    for line in output.splitlines():
        match = _DEVICE_LINE_RE.match(line.rstrip())
        if not match:
            continue
        address = match.group(1)
        name = (match.group(2) or "").strip() or address
        devices.append(Device.build(address, name, address=address))
    return devices


def exited_normally(result: subprocess.CompletedProcess[str]) -> bool:
    # A negative return code means the process was killed by a signal.
    return result.returncode >= 0


class ShellBackend:
    ident = "bluetoothctl"

    def __init__(self, command: str = "bluetoothctl") -> None:
        self._command = command
        self.directory = DeviceDirectory()

    @classmethod
    def init(cls, settings: Settings) -> ShellBackend | None:
        backend = cls(settings.shell_command)
        try:
            result = backend._run("-v")
        except TransportError as exc:
            LOGGER.warning("bluetoothctl probe failed: %s", exc)
            return None
        if result.returncode != 0:
            LOGGER.warning(
                "bluetoothctl probe exited with status %d: %s",
                result.returncode,
                (result.stderr or "").strip(),
            )
            return None
        return backend

    def free(self) -> None:
        self.directory = DeviceDirectory()

    def scan(self, timeout: int) -> None:
        timeout = normalize_timeout(timeout)

        self._run("--", "power", "on")
        self._run("--timeout", str(timeout), "scan", "on")
        result = self._run("--", "devices")
        if not exited_normally(result):
            raise TransportError(
                f"'{self._command} devices' terminated abnormally ({result.returncode})"
            )

        directory = DeviceDirectory(parse_device_lines(result.stdout or ""))
        self.directory = directory
        LOGGER.info("Scan found %d device(s)", len(directory))

    def get_devices(self, max_count: int) -> list[str]:
        return self.directory.names(max_count)

    def is_connected(self, identity: str) -> bool:
        device = self.directory.find(identity)
        if device is None:
            return False

        result = self._run("info", device.address)
        if not exited_normally(result):
            raise TransportError(
                f"'{self._command} info {device.address}' terminated abnormally ({result.returncode})"
            )
        return any(_CONNECTED_MARKER in line for line in (result.stdout or "").splitlines())

    def connect(self, identity: str, timeout: int) -> bool:
        if self.is_connected(identity):
            return True

        device = self.directory.find(identity)
        if device is None:
            return False

        self._run("--", "pairable", "on")
        self._run("--", "pair", device.address)
        self._run("--", "trust", device.address)
        result = self._run("--timeout", str(normalize_timeout(timeout)), "connect", device.address)
        return exited_normally(result)

    def disconnect(self, identity: str, timeout: int) -> bool:
        if not self.is_connected(identity):
            return True

        device = self.directory.find(identity)
        if device is None:
            return False

        result = self._run(
            "--timeout", str(normalize_timeout(timeout)), "disconnect", device.address
        )
        return exited_normally(result)

    def _run(self, *args: str) -> subprocess.CompletedProcess[str]:
        cmd = [self._command, *args]
        LOGGER.debug("Running %s", " ".join(cmd))
        try:
            return subprocess.run(
                cmd,
                check=False,
                capture_output=True,
                text=True,
            )
        except OSError as exc:
            raise TransportError(
                f"Could not run '{' '.join(cmd)}'", errno=exc.errno or 0
            ) from exc
