"""YAML-based menu tree provider."""

import logging
from pathlib import Path
from typing import Any

import yaml

from ..core.errors import MenuConfigError
from ..core.menu_node import ROOT_PARENT, MenuNode
from ..core.menu_tree import MenuTree
from ..core.termination import TerminationPolicy, KILL_MESSAGE, kill_when, static_end

logger = logging.getLogger(__name__)

# Optional keys copied onto MenuNode, with the type each value must have
NODE_FIELDS = {
    "displayed_title": str,
    "title_prefix": str,
    "title_suffix": str,
    "page_size": int,
    "children_alias": str,
    "multi_select": bool,
    "multi_select_child": str,
    "allow_duplicate": bool,
}


def load_menu_tree(path: str | Path) -> MenuTree:
    """
    Load a menu tree from a YAML file.

    The file holds a ``menu`` mapping with a ``nodes`` list. Each node names
    its parent; children are attached in the order they appear in the file,
    so parents must come before their children.

    Example:
        menu:
          nodes:
            - name: main
              title: Welcome
            - name: balance
              title: Check balance
              parent: main

    Args:
        path: Path to the YAML menu file.

    Returns:
        A validated MenuTree.

    Raises:
        FileNotFoundError: If the menu file doesn't exist.
        MenuConfigError: If the file does not describe a valid tree.
    """
    menu_path = Path(path)

    if not menu_path.exists():
        raise FileNotFoundError(f"Menu file not found: {path}")

    with open(menu_path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise MenuConfigError(f"Invalid YAML in {path}: {e}") from e

    return build_menu_tree(data)


def build_menu_tree(data: dict[str, Any]) -> MenuTree:
    """
    Build a menu tree from already parsed YAML data.

    Raises:
        MenuConfigError: If the data does not describe a valid tree.
    """
    if not isinstance(data, dict):
        raise MenuConfigError("Menu data must be a mapping")

    menu = data.get("menu", {})
    nodes = menu.get("nodes") if isinstance(menu, dict) else None
    if not isinstance(nodes, list) or not nodes:
        raise MenuConfigError("Menu must define a non-empty 'nodes' list")

    tree = MenuTree()
    for entry in nodes:
        tree.add(_parse_node(entry))

    tree.validate()
    logger.info(f"Loaded menu tree with {len(tree)} node(s)")
    return tree


def _parse_node(entry: Any) -> MenuNode:
    """Convert one YAML node mapping into a MenuNode."""
    if not isinstance(entry, dict):
        raise MenuConfigError(f"Menu node must be a mapping, got: {entry!r}")

    name = entry.get("name")
    title = entry.get("title")
    if not name or title is None:
        raise MenuConfigError(f"Menu node needs a name and a title: {entry!r}")

    extra = entry.get("extra") or {}
    if not isinstance(extra, dict):
        raise MenuConfigError(f"'extra' of {name!r} must be a mapping")

    options = {}
    for key, expected in NODE_FIELDS.items():
        value = entry.get(key)
        if value is not None:
            options[key] = _check_type(name, key, value, expected)

    # A missing or null parent marks the root
    parent = entry.get("parent")
    if parent is None:
        parent = ROOT_PARENT

    return MenuNode(
        name=str(name),
        title=str(title),
        parent=str(parent),
        extra=extra,
        termination=_parse_termination(name, entry),
        **options,
    )


def _check_type(name: str, key: str, value: Any, expected: type) -> Any:
    """Return value if it has the expected type, else raise MenuConfigError."""
    # bool is a subclass of int, so page_size: true must be refused explicitly
    if isinstance(value, expected) and not (expected is int and isinstance(value, bool)):
        return value
    raise MenuConfigError(
        f"'{key}' of {name!r} must be {expected.__name__}, got {value!r}"
    )


def _parse_termination(name: str, entry: dict[str, Any]) -> TerminationPolicy:
    """Build a node's termination policy from its static settings."""
    conditions = entry.get("kill_when")
    if conditions is not None and (not isinstance(conditions, dict) or not conditions):
        raise MenuConfigError(f"'kill_when' of {name!r} must be a non-empty mapping")

    kill_message = entry.get("kill_message")
    if kill_message is not None:
        _check_type(name, "kill_message", kill_message, str)

    end_message = entry.get("end_message")
    if end_message is not None:
        _check_type(name, "end_message", end_message, str)

    return TerminationPolicy(
        kill_predicate=kill_when(conditions) if conditions else None,
        kill_message=kill_message if kill_message is not None else KILL_MESSAGE,
        end_handler=static_end(end_message) if end_message is not None else None,
    )
