"""Ordered device snapshot produced by a single scan."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from bluedir.core.device_match import first_match
from bluedir.core.model import Device

LOGGER = logging.getLogger(__name__)


class DeviceDirectory:
    """Immutable, insertion-ordered collection of devices.

    Backends never mutate a published directory; a scan builds a new one and
    swaps it in, so readers always see either the old or the new snapshot.
    """

    __slots__ = ("_devices",)

    def __init__(self, devices: Iterable[Device] = ()) -> None:
        seen: set[str] = set()
        kept: list[Device] = []
        for device in devices:
            if device.key in seen:
                LOGGER.debug("Dropping duplicate directory entry %s", device.key)
                continue
            seen.add(device.key)
            kept.append(device)
        self._devices: tuple[Device, ...] = tuple(kept)

    def __len__(self) -> int:
        return len(self._devices)

    def __iter__(self) -> Iterator[Device]:
        return iter(self._devices)

    def __repr__(self) -> str:
        return f"DeviceDirectory({list(self._devices)!r})"

    @property
    def devices(self) -> tuple[Device, ...]:
        return self._devices

    def names(self, max_count: int) -> list[str]:
        if max_count <= 0:
            return []
        return [device.name for device in self._devices[:max_count]]

    def find(self, identity: str) -> Device | None:
        return first_match(self._devices, identity)
