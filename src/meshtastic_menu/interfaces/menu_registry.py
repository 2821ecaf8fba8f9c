"""Abstract interface for resolving menu nodes."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.menu_node import MenuNode


class MenuRegistry(ABC):
    """Abstract interface for looking up nodes in a session's menu tree."""

    @abstractmethod
    def resolve(self, session_address: str, node_name: str) -> "MenuNode":
        """Resolve a node by name.

        Args:
            session_address: Address of the session doing the lookup.
            node_name: Name of the node to resolve.

        Raises:
            NodeNotFoundError: If the session's tree has no such node.
        """
        pass

    @abstractmethod
    def root_name(self, session_address: str) -> str:
        """Get the name of the root node for a session's tree."""
        pass
