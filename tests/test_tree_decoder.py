from __future__ import annotations

import pytest
from dbus_next import Variant

from bluedir.core.errors import DecodeError
from bluedir.core.tree import decode_tree, resolve_adapter, unwrap

ADAPTER_PATH = "/org/bluez/hci0"
DEVICE_PATH = "/org/bluez/hci0/dev_AA_BB_CC_DD_EE_FF"


def _tree(**device_props: Variant) -> dict:
    props = {
        "Address": Variant("s", "AA:BB:CC:DD:EE:FF"),
        "Alias": Variant("s", "Headset"),
        "Connected": Variant("b", False),
    }
    props.update(device_props)
    return {
        "/org/bluez": {"org.bluez.AgentManager1": {}, "org.bluez.ProfileManager1": {}},
        ADAPTER_PATH: {
            "org.bluez.Adapter1": {
                "Address": Variant("s", "00:11:22:33:44:55"),
                "Powered": Variant("b", True),
            },
        },
        DEVICE_PATH: {
            "org.freedesktop.DBus.Introspectable": {},
            "org.bluez.Device1": props,
        },
    }


def test_one_adapter_one_device() -> None:
    decoded = decode_tree(_tree())

    assert decoded.adapter == ADAPTER_PATH
    assert len(decoded.devices) == 1
    device = decoded.devices[0]
    assert device.key == DEVICE_PATH
    assert device.name == "Headset"
    assert device.address == "AA:BB:CC:DD:EE:FF"
    assert device.connected is False
    assert device.paired is None
    assert device.trusted is None


def test_alias_is_preferred_over_name() -> None:
    decoded = decode_tree(_tree(Name=Variant("s", "WH-1000XM4 raw")))
    assert decoded.devices[0].name == "Headset"


def test_missing_alias_falls_back_to_address() -> None:
    tree = _tree()
    del tree[DEVICE_PATH]["org.bluez.Device1"]["Alias"]

    decoded = decode_tree(tree)
    assert len(decoded.devices) == 1
    assert decoded.devices[0].name == "AA:BB:CC:DD:EE:FF"


def test_device_without_any_properties_still_added() -> None:
    decoded = decode_tree({DEVICE_PATH: {"org.bluez.Device1": {}}})
    assert len(decoded.devices) == 1
    assert decoded.devices[0].name == ""
    assert decoded.adapter is None


def test_flags_and_icon_decoded() -> None:
    decoded = decode_tree(
        _tree(
            Icon=Variant("s", "audio-headset"),
            Connected=Variant("b", True),
            Paired=Variant("b", True),
            Trusted=Variant("b", False),
        )
    )
    device = decoded.devices[0]
    assert device.icon == "audio-headset"
    assert device.connected is True
    assert device.paired is True
    assert device.trusted is False


def test_unrecognized_properties_are_ignored() -> None:
    decoded = decode_tree(
        _tree(
            RSSI=Variant("n", -61),
            UUIDs=Variant("as", ["0000110b-0000-1000-8000-00805f9b34fb"]),
            ManufacturerData=Variant("a{qv}", {76: Variant("ay", b"\x02\x15")}),
        )
    )
    assert len(decoded.devices) == 1


def test_hand_built_tree_without_variants() -> None:
    tree = {
        ADAPTER_PATH: {"org.bluez.Adapter1": {"Powered": True}},
        DEVICE_PATH: {"org.bluez.Device1": {"Address": "AA:BB:CC:DD:EE:FF", "Alias": "Speaker"}},
    }
    decoded = decode_tree(tree)
    assert decoded.devices[0].name == "Speaker"


def test_empty_interface_map_is_skipped() -> None:
    tree = _tree()
    tree["/org/bluez/hci0/dev_11_22_33_44_55_66"] = {}
    decoded = decode_tree(tree)
    assert [d.key for d in decoded.devices] == [DEVICE_PATH]


def test_devices_keep_reply_order() -> None:
    tree = {
        ADAPTER_PATH: {"org.bluez.Adapter1": {}},
        f"{ADAPTER_PATH}/dev_02": {"org.bluez.Device1": {"Alias": Variant("s", "Second")}},
        f"{ADAPTER_PATH}/dev_01": {"org.bluez.Device1": {"Alias": Variant("s", "First")}},
    }
    decoded = decode_tree(tree)
    assert [d.name for d in decoded.devices] == ["Second", "First"]


def test_first_adapter_wins() -> None:
    tree = {
        "/org/bluez/hci1": {"org.bluez.Adapter1": {}},
        ADAPTER_PATH: {"org.bluez.Adapter1": {}},
    }
    assert decode_tree(tree).adapter == "/org/bluez/hci1"
    assert resolve_adapter(tree) == "/org/bluez/hci1"


def test_resolve_adapter_not_found() -> None:
    assert resolve_adapter({DEVICE_PATH: {"org.bluez.Device1": {}}}) is None


def test_resolve_adapter_custom_selector() -> None:
    tree = {"/x/radio0": {"com.example.Radio": {}}}
    assert resolve_adapter(tree, "com.example.Radio") == "/x/radio0"


def test_malformed_adapter_entry_aborts_decode() -> None:
    tree = _tree()
    tree[ADAPTER_PATH] = ["org.bluez.Adapter1"]

    with pytest.raises(DecodeError) as exc:
        decode_tree(tree)
    assert ADAPTER_PATH in str(exc.value)

    with pytest.raises(DecodeError):
        resolve_adapter(tree)


def test_malformed_adapter_properties_abort_decode() -> None:
    tree = _tree()
    tree[ADAPTER_PATH]["org.bluez.Adapter1"] = Variant("s", "oops")
    with pytest.raises(DecodeError):
        decode_tree(tree)


def test_wrong_property_type_aborts_decode() -> None:
    with pytest.raises(DecodeError) as exc:
        decode_tree(_tree(Connected=Variant("s", "yes")))
    assert "Connected" in str(exc.value)


def test_root_must_be_a_map() -> None:
    with pytest.raises(DecodeError):
        decode_tree([("/", {})])


def test_long_alias_is_bounded() -> None:
    decoded = decode_tree(_tree(Alias=Variant("s", "x" * 200)))
    assert len(decoded.devices[0].name) == 63


def test_unwrap_nested_variants() -> None:
    value = Variant("a{sv}", {"inner": Variant("as", ["a", "b"])})
    assert unwrap(value) == {"inner": ["a", "b"]}
