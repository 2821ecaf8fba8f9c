"""Abstract interfaces for the Meshtastic Menu Server."""

from .menu_registry import MenuRegistry
from .message_transport import MessageTransport
from .variable_resolver import VariableResolver

__all__ = ["MenuRegistry", "MessageTransport", "VariableResolver"]
