"""Bluetooth device directory with pluggable bluetoothctl and BlueZ D-Bus backends."""

__version__ = "0.1.0"
