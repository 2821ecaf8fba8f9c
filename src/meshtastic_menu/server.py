"""MenuServer - Main orchestrator for the Meshtastic Menu Server."""

import logging

from .interfaces import MenuRegistry, MessageTransport, VariableResolver
from .core import (
    CommandParser,
    SelectCommand,
    MultiSelectCommand,
    ExitCommand,
    BackCommand,
    MoreCommand,
    HomeCommand,
    InvalidCommand,
    MenuConfigError,
    MenuNode,
    MenuRenderer,
    NodeNotFoundError,
    Session,
    SessionManager,
)
from .providers import SessionVariableResolver
from .config import Config

logger = logging.getLogger(__name__)

SERVICE_UNAVAILABLE_MESSAGE = "Service unavailable. Please try again later."


class MenuServer:
    """Main server orchestrating all components.

    Each inbound message is one round trip: the sender's session is loaded,
    the input is applied to the current menu, and one page is sent back.
    Messages from the same address are handled one at a time.
    """

    def __init__(
        self,
        registry: MenuRegistry,
        transport: MessageTransport,
        config: Config | None = None,
        resolver: VariableResolver | None = None,
    ):
        """
        Initialize the menu server.

        Args:
            registry: Registry resolving menu nodes for each session.
            transport: Transport for sending/receiving messages.
            config: Server configuration (uses defaults if None).
            resolver: Variable resolver (substitutes session variables if None).
        """
        self.registry = registry
        self.transport = transport
        self.config = config or Config()

        # Initialize components
        self.parser = CommandParser(delimiter=self.config.multi_select_delimiter)
        self.session_manager = SessionManager(
            timeout_seconds=self.config.session_timeout_minutes * 60
        )
        self.resolver = resolver or SessionVariableResolver(self.session_manager)
        self.renderer = MenuRenderer(
            registry, self.resolver, self.config.render_settings()
        )

        # Register message handler
        self.transport.on_message(self._handle_message)

    def start(self) -> None:
        """Start the server by connecting to transport."""
        logger.info("Starting menu server...")
        self.transport.connect()
        logger.info("Server started and listening for messages")

    def stop(self) -> None:
        """Stop the server by disconnecting transport."""
        logger.info("Stopping menu server...")
        self.transport.disconnect()
        logger.info("Server stopped")

    def _handle_message(self, address: str, message: str) -> None:
        """
        Handle an incoming message from an address.

        Args:
            address: The sender's address.
            message: The message text.
        """
        logger.info(f"[{address}] Received: {message!r}")

        removed = self.session_manager.cleanup_expired()
        if removed:
            logger.info(f"Expired {removed} idle session(s)")

        with self.session_manager.lock(address):
            self._respond(address, message)

    def _respond(self, address: str, message: str) -> None:
        """
        Process a message and send the reply. The address lock must be held.

        Args:
            address: The sender's address.
            message: The message text.
        """
        # A failed request leaves the stored session as it was
        previous = self.session_manager.find_session(address)

        try:
            session = self.session_manager.get_session(address)
            response, new_session = self._process_message(message, session)
        except NodeNotFoundError as e:
            logger.error(f"[{address}] {e}; ending session")
            self.session_manager.remove_session(address)
            self._send(address, SERVICE_UNAVAILABLE_MESSAGE)
            return
        except Exception as e:
            logger.exception(f"[{address}] Error: {e}")
            if previous is None:
                self.session_manager.remove_session(address)
            else:
                self.session_manager.update_session(address, previous)
            self._send_error(address, str(e))
            return

        if new_session is None:
            logger.info(f"[{address}] Session ended")
            self.session_manager.remove_session(address)
        else:
            self.session_manager.update_session(address, new_session)

        self._send(address, response)

    def _process_message(
        self, message: str, session: Session
    ) -> tuple[str, Session | None]:
        """
        Apply a message to a session.

        Args:
            message: The raw message text.
            session: The current session state.

        Returns:
            Tuple of (response_text, updated_session). The session is None
            when the session has ended.
        """
        if not session.started:
            # Whatever opens a session, the first reply is the root menu
            logger.info(f"[{session.address}] New session")
            root = self.registry.root_name(session.address)
            return self._enter(session, root)

        node = self.registry.resolve(session.address, session.current_node)
        command = self.parser.parse(message, multi_select=node.multi_select)
        logger.info(f"[{session.address}] Command: {command.__class__.__name__}")

        if isinstance(command, ExitCommand):
            if not self.config.exit_enabled:
                return self._reject(node, session, "Exit is not available")
            logger.debug(f"Exit requested at {node.name!r}")
            return node.termination.end_message(session.variables), None

        if isinstance(command, BackCommand):
            logger.debug(f"Navigating back from {node.name!r}")
            new_session = session.navigate_back()
            return self._show(new_session, self._current(new_session))

        if isinstance(command, HomeCommand):
            logger.debug("Navigating to root menu")
            new_session = session.navigate_home()
            return self._show(new_session, self._current(new_session))

        if isinstance(command, MoreCommand):
            return self._handle_more(node, session)

        if isinstance(command, SelectCommand):
            if node.multi_select:
                return self._handle_multi_select(node, (command.index,), session)
            return self._handle_select(node, command.index, session)

        if isinstance(command, MultiSelectCommand):
            return self._handle_multi_select(node, command.indices, session)

        if isinstance(command, InvalidCommand):
            logger.debug(f"Invalid command: {command.original_input!r} ({command.reason})")
            return self._reject(node, session, f"Invalid input: {command.original_input.strip()}")

        return self._reject(node, session, "Unknown command type")

    def _current(self, session: Session) -> MenuNode:
        """Resolve the node a session is currently on."""
        return self.registry.resolve(session.address, session.current_node)

    def _enter(self, session: Session, node_name: str) -> tuple[str, Session | None]:
        """
        Enter a node and show its first page.

        A childless node with an end handler ends the path instead.

        Args:
            session: Current session.
            node_name: Name of the node to enter.

        Returns:
            Tuple of (response, updated_session or None if ended).
        """
        node = self.registry.resolve(session.address, node_name)
        new_session = session.navigate_to(node.name, allow_duplicate=node.allow_duplicate)

        if not node.has_children and node.termination.ends_path:
            if node.termination.should_kill(new_session.variables):
                return self._kill(new_session, node)
            logger.info(f"[{session.address}] Path ended at {node.name!r}")
            return node.termination.end_message(new_session.variables), None

        return self._show(new_session, node)

    def _show(
        self, session: Session, node: MenuNode, notice: str | None = None
    ) -> tuple[str, Session | None]:
        """
        Render the next page of a node.

        Args:
            session: Session with the node as its current node.
            node: The node to render.
            notice: Optional line shown above the page.

        Returns:
            Tuple of (page_text, updated_session or None if killed).
        """
        if node.termination.should_kill(session.variables):
            return self._kill(session, node)

        # The variable resolver reads from the stored session
        self.session_manager.update_session(session.address, session)

        page = self.renderer.render(
            node, session.cursor_for(node.name), session.address, notice=notice
        )
        logger.info(
            f"[{session.address}] Showing {node.name!r} items "
            f"{page.window_start + 1}-{page.cursor} of {len(node.children)}"
        )

        new_session = session.with_page(
            node.name, page.window_start, page.cursor, page.last_page
        )
        return page.text, new_session

    def _kill(self, session: Session, node: MenuNode) -> tuple[str, None]:
        """End a session because a node's kill policy triggered."""
        logger.info(f"[{session.address}] Session killed at {node.name!r}")
        return node.termination.kill_message, None

    def _handle_more(self, node: MenuNode, session: Session) -> tuple[str, Session | None]:
        """
        Show the next page of the current node.

        After the last page, the node starts over from its first page.
        """
        if session.is_last_page(node.name):
            logger.debug(f"No more items in {node.name!r}, starting over")
            session = session.release(node.name)
        return self._show(session, node)

    def _handle_select(
        self, node: MenuNode, index: int, session: Session
    ) -> tuple[str, Session | None]:
        """
        Handle selection of a numbered item.

        Args:
            node: The current node.
            index: The 1-based index selected.
            session: Current session.

        Returns:
            Tuple of (response, updated_session).
        """
        child = node.child_at(index)

        if child is None:
            return self._reject(node, session, f"Invalid selection: {index}")

        logger.info(f"[{session.address}] Selected [{index}]: {child}")
        return self._enter(session, child)

    def _handle_multi_select(
        self, node: MenuNode, indices: tuple[int, ...], session: Session
    ) -> tuple[str, Session | None]:
        """
        Handle selection of several items at once.

        The selected child names are stored under the node's name and the
        session moves on to the node's multi-select target.
        """
        if node.multi_select_child is None:
            raise MenuConfigError(f"Node {node.name!r} has no multi-select target")

        selected = []
        for index in indices:
            child = node.child_at(index)
            if child is None:
                return self._reject(node, session, f"Invalid selection: {index}")
            selected.append(child)

        logger.info(f"[{session.address}] Multi-selected {selected} at {node.name!r}")
        new_session = session.with_variables(**{node.name: tuple(selected)})
        return self._enter(new_session, node.multi_select_child)

    def _reject(
        self, node: MenuNode, session: Session, message: str
    ) -> tuple[str, Session | None]:
        """Show the current page again, headed by an error line."""
        logger.warning(f"[{session.address}] {message}")
        return self._show(session.rewind(node.name), node, notice=message)

    def _send(self, address: str, response: str) -> None:
        """Send a response message to an address."""
        if len(response) > self.config.channel_limit:
            logger.warning(
                f"[{address}] Response is {len(response)} chars, "
                f"over the {self.config.channel_limit} char limit"
            )
        preview = response[:50].replace("\n", " ")
        logger.info(f"[{address}] Sending ({len(response)} chars): {preview}...")
        self.transport.send(address, response)

    def _send_error(self, address: str, error: str) -> None:
        """Send error message to an address."""
        message = f"Error: {error}"
        if len(message) <= self.config.channel_limit:
            self.transport.send(address, message)
        else:
            # Truncate long error messages to fit
            max_error_len = self.config.channel_limit - len("Error: ...")
            self.transport.send(address, f"Error: {error[:max_error_len]}...")

    def send_welcome(self, address: str) -> None:
        """
        Start a fresh session for an address and send the root menu.

        Args:
            address: Target address.
        """
        with self.session_manager.lock(address):
            self.session_manager.remove_session(address)
            self._respond(address, "")
