"""Menu tree and variable providers."""

from .session_variables import NullVariableResolver, SessionVariableResolver
from .yaml_menu_provider import build_menu_tree, load_menu_tree

__all__ = [
    "NullVariableResolver",
    "SessionVariableResolver",
    "build_menu_tree",
    "load_menu_tree",
]
