"""Core components for the Meshtastic Menu Server."""

from .command_parser import CommandParser, Command, SelectCommand, MultiSelectCommand, ExitCommand, BackCommand, MoreCommand, HomeCommand, InvalidCommand
from .errors import MenuError, NodeNotFoundError, MenuConfigError
from .menu_node import MenuNode, ROOT_PARENT
from .menu_renderer import MenuRenderer, RenderSettings, RenderedPage
from .menu_tree import MenuTree
from .session import Session
from .session_manager import SessionManager
from .termination import TerminationPolicy, KILL_MESSAGE, NODE_END_EVENT_MESSAGE

__all__ = [
    "CommandParser",
    "Command",
    "SelectCommand",
    "MultiSelectCommand",
    "ExitCommand",
    "BackCommand",
    "MoreCommand",
    "HomeCommand",
    "InvalidCommand",
    "MenuError",
    "NodeNotFoundError",
    "MenuConfigError",
    "MenuNode",
    "ROOT_PARENT",
    "MenuRenderer",
    "RenderSettings",
    "RenderedPage",
    "MenuTree",
    "Session",
    "SessionManager",
    "TerminationPolicy",
    "KILL_MESSAGE",
    "NODE_END_EVENT_MESSAGE",
]
