"""Decoding of object manager trees into adapters and device records.

A ``GetManagedObjects`` reply has the shape ``a{oa{sa{sv}}}``: object path to
interface name to property name to variant. The functions here work on the
generic form of that tree (mappings, lists, and scalars), with any
``dbus_next.Variant`` wrappers removed first, so replies from the bus and
hand-built trees decode the same way.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from dbus_next import Variant

from bluedir.core.errors import DecodeError
from bluedir.core.model import Device

LOGGER = logging.getLogger(__name__)

ADAPTER_INTERFACE = "org.bluez.Adapter1"
DEVICE_INTERFACE = "org.bluez.Device1"

# Alias is the user-facing name; Name is only the raw remote name and is
# deliberately not read.
_STRING_PROPERTIES = {
    "Address": "address",
    "Alias": "alias",
    "Icon": "icon",
}
_FLAG_PROPERTIES = {
    "Connected": "connected",
    "Paired": "paired",
    "Trusted": "trusted",
}


@dataclass(frozen=True)
class DecodedTree:
    adapter: str | None
    devices: tuple[Device, ...]


def unwrap(value: Any) -> Any:
    """Strip variant wrappers recursively, leaving maps, lists, and scalars."""
    if isinstance(value, Variant):
        return unwrap(value.value)
    if isinstance(value, Mapping):
        return {key: unwrap(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [unwrap(item) for item in value]
    return value


def _type_name(value: Any) -> str:
    return type(value).__name__


def iter_interfaces(tree: Any) -> Iterator[tuple[str, str, Mapping[str, Any]]]:
    """Yield ``(object_path, interface, properties)`` while validating shape.

    Raises DecodeError at the first position holding the wrong type.
    """
    root = unwrap(tree)
    if not isinstance(root, Mapping):
        raise DecodeError(f"Managed objects reply must be a map, got {_type_name(root)}")

    for path, interfaces in root.items():
        if not isinstance(path, str):
            raise DecodeError(f"Object path must be a string, got {_type_name(path)}")
        if not isinstance(interfaces, Mapping):
            raise DecodeError(
                f"Object {path}: interfaces must be a map, got {_type_name(interfaces)}"
            )
        for interface, properties in interfaces.items():
            if not isinstance(interface, str):
                raise DecodeError(
                    f"Object {path}: interface name must be a string, got {_type_name(interface)}"
                )
            if not isinstance(properties, Mapping):
                raise DecodeError(
                    f"Object {path}: properties of {interface} must be a map, "
                    f"got {_type_name(properties)}"
                )
            yield path, interface, properties


def resolve_adapter(tree: Any, selector: str = ADAPTER_INTERFACE) -> str | None:
    """Return the object path of the first object exposing ``selector``.

    There is no real notion of a default adapter, so the first one in the
    reply is used.
    """
    for path, interface, _ in iter_interfaces(tree):
        if interface == selector:
            return path
    return None


def _decode_device(path: str, properties: Mapping[str, Any]) -> Device:
    values: dict[str, Any] = {}
    for prop, value in properties.items():
        if prop in _STRING_PROPERTIES:
            if not isinstance(value, str):
                raise DecodeError(
                    f"Object {path}: property {prop} must be a string, got {_type_name(value)}"
                )
            values[_STRING_PROPERTIES[prop]] = value
        elif prop in _FLAG_PROPERTIES:
            if not isinstance(value, bool):
                raise DecodeError(
                    f"Object {path}: property {prop} must be a boolean, got {_type_name(value)}"
                )
            values[_FLAG_PROPERTIES[prop]] = value

    address = values.get("address", "")
    return Device.build(
        path,
        values.get("alias") or address,
        address=address,
        icon=values.get("icon", ""),
        connected=values.get("connected"),
        paired=values.get("paired"),
        trusted=values.get("trusted"),
    )


def decode_tree(
    tree: Any,
    *,
    adapter_selector: str = ADAPTER_INTERFACE,
    device_selector: str = DEVICE_INTERFACE,
) -> DecodedTree:
    """Decode a whole reply; nothing is returned unless every object decodes."""
    adapter: str | None = None
    devices: list[Device] = []

    for path, interface, properties in iter_interfaces(tree):
        if interface == adapter_selector:
            if adapter is None:
                adapter = path
        elif interface == device_selector:
            devices.append(_decode_device(path, properties))

    LOGGER.debug("Decoded %d device(s), adapter=%s", len(devices), adapter)
    return DecodedTree(adapter=adapter, devices=tuple(devices))
