"""Caller-supplied device name to directory entry matching."""

from __future__ import annotations

from collections.abc import Iterable

from bluedir.core.model import Device


def name_prefix_match(device: Device, identity: str) -> bool:
    if not identity:
        return False
    return device.name.startswith(identity)


def first_match(devices: Iterable[Device], identity: str) -> Device | None:
    for device in devices:
        if name_prefix_match(device, identity):
            return device
    return None
