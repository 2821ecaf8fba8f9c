"""Menu node entity."""

from dataclasses import dataclass, field
from typing import Any, Mapping

from .termination import TerminationPolicy

# Parent value marking the root of a tree
ROOT_PARENT = "0"


@dataclass(frozen=True)
class MenuNode:
    """A single entry in a menu tree (immutable).

    Nodes only hold data. Pagination state is kept per session, so one node
    instance can be shared by every session walking the tree.

    Attributes:
        name: Unique key within the tree.
        title: Raw title, also used when a parent lists this node.
        parent: Name of the enclosing node, or ROOT_PARENT for the root.
        children: Child names in rendering order.
        displayed_title: Replaces the composed title entirely when set.
        title_prefix: Prepended to the title when set.
        title_suffix: Appended to the title when set.
        page_size: Items per page for this node (None uses the default).
        children_alias: Noun used in the "More" line instead of "items".
        multi_select: Whether several children can be picked at once.
        multi_select_child: Node that receives a multi-selection.
        allow_duplicate: Whether this node may appear twice on a path.
        extra: Application data, never read by the renderer.
        termination: Kill and end-of-path hooks.
    """

    name: str
    title: str
    parent: str = ROOT_PARENT
    children: tuple[str, ...] = field(default_factory=tuple)
    displayed_title: str | None = None
    title_prefix: str | None = None
    title_suffix: str | None = None
    page_size: int | None = None
    children_alias: str | None = None
    multi_select: bool = False
    multi_select_child: str | None = None
    allow_duplicate: bool = False
    extra: Mapping[str, Any] = field(default_factory=dict)
    termination: TerminationPolicy = field(default_factory=TerminationPolicy)

    def __post_init__(self):
        # Accept lists from callers but store immutable copies
        object.__setattr__(self, "children", tuple(self.children))
        object.__setattr__(self, "extra", dict(self.extra))

    @property
    def is_root(self) -> bool:
        """True if this node has no parent."""
        return self.parent == ROOT_PARENT

    @property
    def has_children(self) -> bool:
        """True if this node has any child entries."""
        return len(self.children) > 0

    @property
    def display_title(self) -> str:
        """Title line shown at the top of this node's pages."""
        if self.displayed_title is not None:
            return self.displayed_title
        parts = [self.title_prefix, self.title, self.title_suffix]
        return "-".join(part for part in parts if part is not None)

    def child_at(self, position: int) -> str | None:
        """
        Get a child name by 1-based position.

        Returns None if position is out of range.
        """
        if position < 1 or position > len(self.children):
            return None
        return self.children[position - 1]

    def effective_page_size(self, default: int) -> int:
        """Items per page for this node, falling back to default."""
        if self.page_size is not None and self.page_size > 0:
            return self.page_size
        return default

    def get_extra(self, key: str, default: Any = None) -> Any:
        """Look up application data attached to this node."""
        return self.extra.get(key, default)
