from __future__ import annotations

from bluedir.core.device_match import first_match, name_prefix_match
from bluedir.core.directory import DeviceDirectory
from bluedir.core.model import DEVNAME_MAXLEN, Device


def _devices() -> list[Device]:
    return [
        Device.build("AA:00", "WI-XB400", address="AA:00"),
        Device.build("AA:01", "WH-1000XM4", address="AA:01"),
        Device.build("AA:02", "WI-C310", address="AA:02"),
    ]


def test_prefix_match_not_exact() -> None:
    device = Device.build("k", "WI-XB400")
    assert name_prefix_match(device, "WI")
    assert name_prefix_match(device, "WI-XB400")
    assert not name_prefix_match(device, "XB400")
    assert not name_prefix_match(device, "WI-XB400 Pro")


def test_empty_identity_matches_nothing() -> None:
    assert first_match(_devices(), "") is None


def test_find_returns_first_in_order() -> None:
    directory = DeviceDirectory(_devices())
    found = directory.find("WI")
    assert found is not None
    assert found.key == "AA:00"


def test_names_truncates_to_first_n() -> None:
    directory = DeviceDirectory(_devices())
    assert directory.names(2) == ["WI-XB400", "WH-1000XM4"]
    assert directory.names(10) == ["WI-XB400", "WH-1000XM4", "WI-C310"]
    assert directory.names(0) == []
    assert directory.names(-3) == []


def test_duplicate_keys_keep_first() -> None:
    directory = DeviceDirectory(
        [Device.build("AA:00", "First"), Device.build("AA:00", "Second"), Device.build("AA:01", "Other")]
    )
    assert [d.name for d in directory] == ["First", "Other"]
    assert len(directory) == 2


def test_build_bounds_text_fields() -> None:
    device = Device.build("k", "n" * 100, address="a" * 40, icon="i" * 80)
    assert len(device.name) == DEVNAME_MAXLEN - 1
    assert len(device.address) == 31
    assert len(device.icon) == 63
