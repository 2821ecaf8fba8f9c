"""Menu renderer paginating a node's children into channel-sized pages."""

import logging
from dataclasses import dataclass

from ..interfaces import MenuRegistry, VariableResolver
from .menu_node import MenuNode

logger = logging.getLogger(__name__)

EMPTY_MENU_MESSAGE = "No items available"
EXIT_LINE = "0.Exit"
BACK_LINE = "#.Back"
DEFAULT_CHILDREN_ALIAS = "items"


@dataclass(frozen=True)
class RenderSettings:
    """Channel settings applied to every render.

    Attributes:
        channel_limit: Maximum characters the channel delivers per message.
        separator: Token placed between lines.
        exit_enabled: Whether the "Exit" line is offered.
        default_page_size: Items per page when a node sets no page size.
    """

    channel_limit: int = 230
    separator: str = "\n"
    exit_enabled: bool = True
    default_page_size: int = 5


@dataclass(frozen=True)
class RenderedPage:
    """Result of rendering one page of a node.

    Attributes:
        text: The page text.
        window_start: Offset of the first child shown.
        cursor: Offset of the first child not shown; the next page starts here.
        last_page: True if no children remain after this page.
        oversized: True if the page could not be shrunk under the channel
            limit. The text is sent anyway on a best-effort basis.
    """

    text: str
    window_start: int
    cursor: int
    last_page: bool
    oversized: bool = False

    @property
    def item_count(self) -> int:
        """Number of children shown on this page."""
        return self.cursor - self.window_start


class MenuRenderer:
    """Renders a node's children as numbered pages that fit the channel.

    The page is rendered, measured, and shrunk one item at a time until it
    fits. Line widths vary with numbering, titles and substituted variables,
    so the item count cannot be worked out ahead of time.
    """

    def __init__(
        self,
        registry: MenuRegistry,
        resolver: VariableResolver,
        settings: RenderSettings | None = None,
    ):
        """
        Initialize the renderer.

        Args:
            registry: Registry used to look up child titles.
            resolver: Resolver applied to each candidate page.
            settings: Channel settings (uses defaults if None).
        """
        self.registry = registry
        self.resolver = resolver
        self.settings = settings or RenderSettings()

    def render(
        self,
        node: MenuNode,
        cursor: int,
        session_address: str,
        notice: str | None = None,
    ) -> RenderedPage:
        """
        Render the page of node starting at cursor.

        Lines appear in this order: title, numbered items, Exit, Back, More.
        A notice, if given, goes above the title and counts against the limit.

        Args:
            node: The node whose children are listed.
            cursor: Offset of the first child to show, from the session.
            session_address: Session the page is rendered for.
            notice: Optional line shown above the title.

        Returns:
            The rendered page. Its cursor is where the next page starts.

        Raises:
            NodeNotFoundError: If a child on this page cannot be resolved.
        """
        total = len(node.children)
        start = min(max(cursor, 0), total)
        limit = node.effective_page_size(self.settings.default_page_size)
        margin = total - start
        window_end = start + margin if margin < limit else start + limit

        # Resolve every title up front so a missing node fails before rendering
        titles = [
            self.registry.resolve(session_address, name).title
            for name in node.children[start:window_end]
        ]

        # Always place at least one item when any remain
        floor = min(start + 1, window_end)

        logger.debug(
            f"Rendering {node.name!r} for {session_address}: "
            f"items {start + 1}-{window_end} of {total}"
        )

        while True:
            text = self._build_page(node, titles[: window_end - start], start, total, notice)
            text = self.resolver.substitute(text, session_address)

            if len(text) <= self.settings.channel_limit:
                oversized = False
                break

            if window_end <= floor:
                oversized = True
                logger.warning(
                    f"Page for {node.name!r} is {len(text)} chars with "
                    f"{window_end - start} item(s), over the "
                    f"{self.settings.channel_limit} char limit; sending anyway"
                )
                break

            window_end -= 1
            logger.debug(f"Page too long ({len(text)} chars), shrinking to {window_end - start} item(s)")

        return RenderedPage(
            text=text,
            window_start=start,
            cursor=window_end,
            last_page=window_end == total,
            oversized=oversized,
        )

    def _build_page(
        self,
        node: MenuNode,
        titles: list[str],
        start: int,
        total: int,
        notice: str | None = None,
    ) -> str:
        """Build the unsubstituted text for one candidate page."""
        lines = [notice] if notice else []
        lines.append(node.display_title)

        # Also covers a cursor already past the last child
        if not titles:
            lines.append(EMPTY_MENU_MESSAGE)
        else:
            for number, title in enumerate(titles, start + 1):
                lines.append(f"{number}.{title}")

        if self.settings.exit_enabled:
            lines.append(EXIT_LINE)

        if not node.is_root:
            lines.append(BACK_LINE)

        remaining = total - start - len(titles)
        if remaining > 0:
            alias = node.children_alias or DEFAULT_CHILDREN_ALIAS
            lines.append(f"00.More({remaining} {alias})")

        return self.settings.separator.join(lines)
