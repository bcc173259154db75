from __future__ import annotations

import pytest

from bluedir.backends.bus import BusBackend
from bluedir.backends.shell import ShellBackend
from bluedir.core.errors import BackendNotFoundError
from bluedir.core.registry import BACKENDS, lookup_backend


def test_registry_order_and_identifiers() -> None:
    assert [entry.ident for entry in BACKENDS] == ["bluetoothctl", "bluez"]


def test_exact_identifiers() -> None:
    assert lookup_backend("bluetoothctl").init == ShellBackend.init
    assert lookup_backend("bluez").init == BusBackend.init


def test_prefix_picks_first_registered() -> None:
    assert lookup_backend("blue").ident == "bluetoothctl"
    assert lookup_backend("bluez").ident == "bluez"


def test_unknown_identifier_raises() -> None:
    with pytest.raises(BackendNotFoundError) as exc:
        lookup_backend("bogus")
    assert "bogus" in str(exc.value)


def test_longer_than_identifier_does_not_match() -> None:
    with pytest.raises(BackendNotFoundError):
        lookup_backend("bluetoothctl2")
