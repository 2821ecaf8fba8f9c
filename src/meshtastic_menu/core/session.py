"""Session management for per-address state."""

from dataclasses import dataclass, field, replace
from typing import Any, Mapping


@dataclass(frozen=True)
class Session:
    """Per-address session state (immutable).

    Attributes:
        address: The address this session belongs to.
        path: Node names from the root to the current node. Empty until the
            root menu has been shown.
        cursors: Pagination cursor of each node visited, by node name.
        page_starts: Offset of the page last shown for each node.
        last_pages: Whether the page last shown for each node was its last.
        variables: Session values for template substitution and hooks.
    """

    address: str = ""
    path: tuple[str, ...] = field(default_factory=tuple)
    cursors: Mapping[str, int] = field(default_factory=dict)
    page_starts: Mapping[str, int] = field(default_factory=dict)
    last_pages: Mapping[str, bool] = field(default_factory=dict)
    variables: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "path", tuple(self.path))
        object.__setattr__(self, "cursors", dict(self.cursors))
        object.__setattr__(self, "page_starts", dict(self.page_starts))
        object.__setattr__(self, "last_pages", dict(self.last_pages))
        object.__setattr__(self, "variables", dict(self.variables))

    @property
    def started(self) -> bool:
        """True once the session has a current node."""
        return bool(self.path)

    @property
    def current_node(self) -> str | None:
        """Name of the node currently shown, or None before the first menu."""
        return self.path[-1] if self.path else None

    def cursor_for(self, node_name: str) -> int:
        """Get the pagination cursor for a node (0 if never rendered)."""
        return self.cursors.get(node_name, 0)

    def page_start_for(self, node_name: str) -> int:
        """Get the offset of the page last shown for a node."""
        return self.page_starts.get(node_name, 0)

    def is_last_page(self, node_name: str) -> bool:
        """Check whether the page last shown for a node was its last."""
        return self.last_pages.get(node_name, False)

    def with_page(
        self, node_name: str, window_start: int, cursor: int, last_page: bool
    ) -> "Session":
        """Record the page just shown for a node and its new cursor."""
        return replace(
            self,
            cursors={**self.cursors, node_name: cursor},
            page_starts={**self.page_starts, node_name: window_start},
            last_pages={**self.last_pages, node_name: last_page},
        )

    def rewind(self, node_name: str) -> "Session":
        """Move a node's cursor back to the start of the page last shown."""
        return replace(
            self,
            cursors={**self.cursors, node_name: self.page_start_for(node_name)},
        )

    def release(self, node_name: str) -> "Session":
        """Reset a node's pagination so it starts from its first page."""
        cursors = {k: v for k, v in self.cursors.items() if k != node_name}
        page_starts = {k: v for k, v in self.page_starts.items() if k != node_name}
        last_pages = {k: v for k, v in self.last_pages.items() if k != node_name}
        return replace(self, cursors=cursors, page_starts=page_starts, last_pages=last_pages)

    def navigate_to(self, node_name: str, allow_duplicate: bool = False) -> "Session":
        """
        Enter a node, releasing its pagination.

        If the node is already on the path and duplicates are not allowed,
        the path is cut back to that earlier entry instead.
        """
        if node_name in self.path and not allow_duplicate:
            path = self.path[: self.path.index(node_name) + 1]
        else:
            path = self.path + (node_name,)
        return replace(self, path=path).release(node_name)

    def navigate_back(self) -> "Session":
        """Return to the previous node, releasing its pagination."""
        if len(self.path) <= 1:
            if not self.path:
                return self
            return self.release(self.path[0])

        left = self.path[-1]
        session = replace(self, path=self.path[:-1]).release(left)
        return session.release(session.current_node)

    def navigate_home(self) -> "Session":
        """Return to the root, releasing all pagination."""
        if not self.path:
            return self
        return replace(self, path=self.path[:1], cursors={}, page_starts={}, last_pages={})

    def with_variables(self, **values: Any) -> "Session":
        """Return a session with additional variables set."""
        return replace(self, variables={**self.variables, **values})
