"""In-memory menu tree."""

import logging
from dataclasses import replace

from ..interfaces import MenuRegistry
from .errors import MenuConfigError, NodeNotFoundError
from .menu_node import ROOT_PARENT, MenuNode

logger = logging.getLogger(__name__)


class MenuTree(MenuRegistry):
    """A menu tree shared by all sessions.

    Nodes are added once while the tree is assembled; each node is linked
    into its parent's children in the order it was added. Once the tree is
    built it is read-only, and resolution ignores the session address.
    """

    def __init__(self):
        self._nodes: dict[str, MenuNode] = {}
        self._root: str | None = None

    def add(self, node: MenuNode) -> MenuNode:
        """
        Add a node and append it to its parent's children.

        The parent must already be in the tree. Children listed on the node
        itself are kept, and later additions naming it as parent are appended.

        Args:
            node: The node to add.

        Returns:
            The node as stored in the tree.

        Raises:
            MenuConfigError: If the name is taken, a second root is added,
                or the parent is unknown.
        """
        if node.name == ROOT_PARENT:
            raise MenuConfigError(f"Node name is reserved: {node.name}")

        if node.name in self._nodes:
            raise MenuConfigError(f"Duplicate node name: {node.name}")

        if node.is_root:
            if self._root is not None:
                raise MenuConfigError(
                    f"Tree already has a root ({self._root}), cannot add {node.name}"
                )
            self._root = node.name
        else:
            parent = self._nodes.get(node.parent)
            if parent is None:
                raise MenuConfigError(
                    f"Parent {node.parent!r} of {node.name!r} is not in the tree"
                )
            if node.name not in parent.children:
                self._nodes[parent.name] = replace(
                    parent, children=parent.children + (node.name,)
                )

        self._nodes[node.name] = node
        logger.debug(f"Added node {node.name!r} under {node.parent!r}")
        return node

    def validate(self) -> None:
        """
        Check that the tree is complete.

        Raises:
            MenuConfigError: If there is no root, or a child or multi-select
                target is missing.
        """
        if self._root is None:
            raise MenuConfigError("Menu tree has no root node")

        for node in self._nodes.values():
            for child in node.children:
                if child not in self._nodes:
                    raise MenuConfigError(
                        f"Child {child!r} of {node.name!r} is not in the tree"
                    )
            if node.multi_select and node.multi_select_child is None:
                raise MenuConfigError(
                    f"Multi-select node {node.name!r} has no multi_select_child"
                )
            if node.multi_select_child is not None and node.multi_select_child not in self._nodes:
                raise MenuConfigError(
                    f"Multi-select target {node.multi_select_child!r} of "
                    f"{node.name!r} is not in the tree"
                )

    def resolve(self, session_address: str, node_name: str) -> MenuNode:
        """Resolve a node by name (the tree is the same for every session)."""
        try:
            return self._nodes[node_name]
        except KeyError:
            raise NodeNotFoundError(node_name) from None

    def root_name(self, session_address: str) -> str:
        """Get the root node name."""
        if self._root is None:
            raise NodeNotFoundError(ROOT_PARENT)
        return self._root

    def __contains__(self, node_name: str) -> bool:
        return node_name in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)
