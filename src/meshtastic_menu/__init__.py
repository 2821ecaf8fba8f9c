"""Meshtastic Menu Server - paged menus over mesh radio."""

__version__ = "0.1.0"
