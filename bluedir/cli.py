"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
import sys
import time

import typer

from bluedir.core.errors import BluedirError
from bluedir.core.registry import BACKENDS
from bluedir.core.session import ErrorCode, Session

app = typer.Typer(help="Bluetooth device discovery and connection via bluetoothctl or BlueZ")

MAX_LISTED_DEVICES = 64

_BACKEND_OPTION = typer.Option(None, "--backend", "-b", help="Backend identifier (prefix match)")
_SCAN_TIMEOUT_OPTION = typer.Option(None, "--scan-timeout", help="Discovery window in seconds")


def _open_session(backend: str | None) -> Session:
    session = Session()
    if session.open(backend or session.settings.backend) != ErrorCode.OK:
        raise BluedirError(session.errmsg())
    return session


def _flag(value: bool | None) -> str:
    if value is None:
        return "-"
    return "yes" if value else "no"


def wait_status(session: Session, device: str, connected: bool, timeout: int) -> bool:
    """Poll once per second until ``device`` reaches the wanted state."""
    while True:
        if session.is_connected(device) == connected:
            return True
        if timeout <= 0:
            return False
        time.sleep(1)
        timeout -= 1


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log backend activity to stderr"),
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )


@app.command("backends")
def list_backends() -> None:
    """List available backend identifiers."""
    for entry in BACKENDS:
        typer.echo(entry.ident)


@app.command("scan")
def scan(
    backend: str | None = _BACKEND_OPTION,
    timeout: int | None = typer.Option(None, "--timeout", "-t", help="Discovery window in seconds"),
    details: bool = typer.Option(False, "--details", help="Show address and state flags"),
) -> None:
    """Scan for devices and list them."""
    try:
        with _open_session(backend) as session:
            session.scan(timeout)
            if details:
                devices = session.list_devices()[:MAX_LISTED_DEVICES]
                for index, device in enumerate(devices):
                    typer.echo(
                        f"{index:2d}: {device.name} [{device.address or device.key}] "
                        f"connected={_flag(device.connected)} paired={_flag(device.paired)} "
                        f"trusted={_flag(device.trusted)}"
                    )
            else:
                devices = session.get_devices(MAX_LISTED_DEVICES)
                for index, name in enumerate(devices):
                    typer.echo(f"{index:2d}: {name}")
            if not devices:
                typer.echo("No Bluetooth devices found")
    except BluedirError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("status")
def status(
    device: str = typer.Argument(..., help="Device name or name prefix"),
    backend: str | None = _BACKEND_OPTION,
    scan_timeout: int | None = _SCAN_TIMEOUT_OPTION,
) -> None:
    """Report whether a device is connected."""
    try:
        with _open_session(backend) as session:
            session.scan(scan_timeout)
            state = "connected" if session.is_connected(device) else "disconnected"
            typer.echo(f"{device}: {state}")
    except BluedirError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("connect")
def connect(
    device: str = typer.Argument(..., help="Device name or name prefix"),
    backend: str | None = _BACKEND_OPTION,
    scan_timeout: int | None = _SCAN_TIMEOUT_OPTION,
    timeout: int = typer.Option(5, "--timeout", "-t", help="Connect command timeout in seconds"),
    wait: int = typer.Option(5, "--wait", "-w", help="Seconds to wait for the link to come up"),
) -> None:
    """Pair, trust, and connect a device, then wait for the connection."""
    try:
        with _open_session(backend) as session:
            session.scan(scan_timeout)
            typer.echo(f"{device} connecting")
            if not session.connect(device, timeout):
                raise BluedirError(f"Connect to '{device}' was not issued")
            ok = wait_status(session, device, True, wait)
            typer.echo(f"{device} connected {'OK' if ok else 'fail'}")
        if not ok:
            raise typer.Exit(code=1)
    except BluedirError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("disconnect")
def disconnect(
    device: str = typer.Argument(..., help="Device name or name prefix"),
    backend: str | None = _BACKEND_OPTION,
    scan_timeout: int | None = _SCAN_TIMEOUT_OPTION,
    timeout: int = typer.Option(5, "--timeout", "-t", help="Disconnect command timeout in seconds"),
    wait: int = typer.Option(5, "--wait", "-w", help="Seconds to wait for the link to drop"),
) -> None:
    """Disconnect a device, then wait for the link to drop."""
    try:
        with _open_session(backend) as session:
            session.scan(scan_timeout)
            typer.echo(f"{device} disconnecting")
            if not session.disconnect(device, timeout):
                raise BluedirError(f"Disconnect from '{device}' was not issued")
            ok = wait_status(session, device, False, wait)
            typer.echo(f"{device} disconnected {'OK' if ok else 'fail'}")
        if not ok:
            raise typer.Exit(code=1)
    except BluedirError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
