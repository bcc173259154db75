"""Core data models shared by backends, session, and CLI."""

from __future__ import annotations

from dataclasses import dataclass

# Sizes include the terminator of the original fixed buffers, so the visible
# text is one character shorter.
DEVNAME_MAXLEN = 64
ADDRESS_MAXLEN = 32
ICON_MAXLEN = 64


def bounded(text: str, size: int) -> str:
    return text[: size - 1]


@dataclass(frozen=True)
class Device:
    key: str
    name: str
    address: str = ""
    icon: str = ""
    connected: bool | None = None
    paired: bool | None = None
    trusted: bool | None = None

    @classmethod
    def build(
        cls,
        key: str,
        name: str,
        *,
        address: str = "",
        icon: str = "",
        connected: bool | None = None,
        paired: bool | None = None,
        trusted: bool | None = None,
    ) -> Device:
        """Create a record with every text field clipped to its buffer size."""
        return cls(
            key=key,
            name=bounded(name, DEVNAME_MAXLEN),
            address=bounded(address, ADDRESS_MAXLEN),
            icon=bounded(icon, ICON_MAXLEN),
            connected=connected,
            paired=paired,
            trusted=trusted,
        )
