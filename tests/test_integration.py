"""Integration tests for MenuServer."""

import threading

import pytest
from meshtastic_menu.server import MenuServer, SERVICE_UNAVAILABLE_MESSAGE
from meshtastic_menu.providers import load_menu_tree
from meshtastic_menu.config import Config
from meshtastic_menu.core import (
    MenuNode,
    MenuTree,
    TerminationPolicy,
    NODE_END_EVENT_MESSAGE,
)
from meshtastic_menu.core.termination import kill_when
from meshtastic_menu.interfaces import VariableResolver


ROOT_PAGE = "Main Menu\n1.Weather\n2.Market\n3.Basket\n4.Nothing here\n0.Exit"
WEATHER_PAGE = "Weather\n1.Forecast\n2.Warnings\n0.Exit\n#.Back"
MARKET_PAGE = "Market\n1.Eggs\n2.Bread\n3.Honey\n0.Exit\n#.Back"


class MockTransport:
    """Mock transport for testing."""

    def __init__(self):
        self._callbacks = []
        self.sent_messages = []
        self._connected = False

    def send(self, address: str, message: str) -> None:
        self.sent_messages.append((address, message))

    def on_message(self, callback) -> None:
        self._callbacks.append(callback)

    def connect(self) -> None:
        self._connected = True

    def disconnect(self) -> None:
        self._connected = False

    def simulate_message(self, address: str, message: str) -> None:
        """Simulate receiving a message."""
        for callback in self._callbacks:
            callback(address, message)

    def last_message(self, address: str = "!node1") -> str:
        """Get the last message sent to an address."""
        return [m for a, m in self.sent_messages if a == address][-1]


def converse(transport, *messages, address="!node1"):
    """Send messages in order and return the reply to the last one."""
    for message in messages:
        transport.simulate_message(address, message)
    return transport.last_message(address)


class TestMenuServerIntegration:
    """Integration tests for MenuServer."""

    @pytest.fixture
    def server(self, menu_file):
        """Create a server with mock transport and the sample YAML menu."""
        tree = load_menu_tree(menu_file)
        transport = MockTransport()
        server = MenuServer(tree, transport, Config())
        server.start()
        return server, transport

    def test_start_and_stop(self, server):
        """start connects and stop disconnects the transport."""
        srv, transport = server
        assert transport._connected is True
        srv.stop()
        assert transport._connected is False

    def test_first_message_shows_root(self, server):
        """Whatever a new session sends, it gets the root menu."""
        srv, transport = server

        transport.simulate_message("!node1", "hello")

        assert transport.sent_messages == [("!node1", ROOT_PAGE)]
        assert srv.session_manager.find_session("!node1").path == ("main",)

    def test_send_welcome(self, server):
        """send_welcome starts a fresh session at the root."""
        srv, transport = server
        converse(transport, "hi", "1")

        srv.send_welcome("!node1")

        assert transport.last_message() == ROOT_PAGE
        assert srv.session_manager.find_session("!node1").path == ("main",)

    def test_select_child_menu(self, server):
        """Selecting an item with children shows its page."""
        _, transport = server
        assert converse(transport, "hi", "1") == WEATHER_PAGE

    def test_leaf_with_end_message_ends_session(self, server):
        """A leaf with an end handler ends the session with its message."""
        srv, transport = server

        assert converse(transport, "hi", "1", "1") == "Sunny all day"
        assert srv.session_manager.find_session("!node1") is None

    def test_leaf_without_end_handler_shows_empty_menu(self, server):
        """A leaf without an end handler is shown as an empty menu."""
        _, transport = server
        reply = converse(transport, "hi", "1", "2")
        assert reply == "Warnings\nNo items available\n0.Exit\n#.Back"

    def test_back(self, server):
        """# returns to the parent menu."""
        _, transport = server
        assert converse(transport, "hi", "1", "#") == ROOT_PAGE

    def test_back_at_root(self, server):
        """# at the root shows the root again."""
        _, transport = server
        assert converse(transport, "hi", "#") == ROOT_PAGE

    def test_home(self, server):
        """* returns to the root from anywhere."""
        srv, transport = server
        assert converse(transport, "hi", "1", "2", "*") == ROOT_PAGE
        assert srv.session_manager.find_session("!node1").path == ("main",)

    def test_exit_ends_session(self, server):
        """0 ends the session."""
        srv, transport = server

        assert converse(transport, "hi", "1", "0") == NODE_END_EVENT_MESSAGE
        assert srv.session_manager.find_session("!node1") is None

    def test_new_session_after_exit(self, server):
        """The next message after an exit starts over at the root."""
        _, transport = server
        assert converse(transport, "hi", "0", "1") == ROOT_PAGE

    def test_invalid_selection(self, server):
        """Selecting a missing item repeats the page with a notice."""
        _, transport = server
        assert converse(transport, "hi", "9") == "Invalid selection: 9\n" + ROOT_PAGE

    def test_invalid_input(self, server):
        """Unrecognised input repeats the page with a notice."""
        srv, transport = server
        assert converse(transport, "hi", "hello") == "Invalid input: hello\n" + ROOT_PAGE
        assert srv.session_manager.find_session("!node1").path == ("main",)

    def test_multi_select(self, server):
        """Several items can be picked at once on a multi-select menu."""
        srv, transport = server

        assert converse(transport, "hi", "2") == MARKET_PAGE
        reply = converse(transport, "1,3")

        assert reply == "Basket: eggs, honey\nNo items available\n0.Exit\n#.Back"
        session = srv.session_manager.find_session("!node1")
        assert session.variables["market"] == ("eggs", "honey")
        assert session.path == ("main", "market", "basket")

    def test_single_select_on_multi_select_menu(self, server):
        """One number on a multi-select menu picks that item alone."""
        _, transport = server
        reply = converse(transport, "hi", "2", "2")
        assert reply.startswith("Basket: bread\n")

    def test_multi_select_invalid_item(self, server):
        """A missing item rejects the whole multi-selection."""
        _, transport = server
        assert converse(transport, "hi", "2", "1,9") == "Invalid selection: 9\n" + MARKET_PAGE

    def test_unresolved_variable_left_in_place(self, server):
        """Placeholders without a value are shown as written."""
        _, transport = server
        reply = converse(transport, "hi", "3")
        assert reply.startswith("Basket: {market}\n")

    def test_independent_sessions(self, server):
        """Different addresses navigate independently."""
        _, transport = server

        converse(transport, "hi", "1", address="!node1")
        reply2 = converse(transport, "hi", address="!node2")

        assert transport.last_message("!node1") == WEATHER_PAGE
        assert reply2 == ROOT_PAGE

    def test_concurrent_addresses(self, server):
        """Messages from many addresses at once each get their own reply."""
        srv, transport = server
        addresses = [f"!node{i}" for i in range(10)]

        threads = [
            threading.Thread(target=transport.simulate_message, args=(address, "hi"))
            for address in addresses
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(a for a, _ in transport.sent_messages) == sorted(addresses)
        assert all(m == ROOT_PAGE for _, m in transport.sent_messages)
        assert srv.session_manager.session_count() == 10


class TestPagination:
    """Tests for paging through menus over the server."""

    @pytest.fixture
    def server(self, menu_file):
        """Server whose channel fits only part of the root menu."""
        tree = load_menu_tree(menu_file)
        transport = MockTransport()
        server = MenuServer(tree, transport, Config(channel_limit=55))
        server.start()
        return server, transport

    def test_first_page_shrinks_to_fit(self, server):
        """The root is split when it doesn't fit the channel."""
        _, transport = server
        reply = converse(transport, "hi")
        assert reply == "Main Menu\n1.Weather\n2.Market\n0.Exit\n00.More(2 items)"
        assert len(reply) <= 55

    def test_more_shows_next_page(self, server):
        """00 continues the numbering on the next page."""
        _, transport = server
        assert converse(transport, "hi", "00") == "Main Menu\n3.Basket\n4.Nothing here\n0.Exit"

    def test_more_after_last_page_starts_over(self, server):
        """00 on the last page goes back to the first page."""
        _, transport = server
        reply = converse(transport, "hi", "00", "00")
        assert reply == "Main Menu\n1.Weather\n2.Market\n0.Exit\n00.More(2 items)"

    def test_select_on_second_page(self, server):
        """Items on later pages are selected by their own numbers."""
        _, transport = server
        reply = converse(transport, "hi", "00", "4")
        assert reply == "Nothing here\nNo items available\n0.Exit\n#.Back"

    def test_back_restarts_parent(self, server):
        """Going back shows the parent from its first page."""
        _, transport = server
        reply = converse(transport, "hi", "00", "4", "#")
        assert reply == "Main Menu\n1.Weather\n2.Market\n0.Exit\n00.More(2 items)"

    def test_invalid_input_repeats_same_page(self, server):
        """A rejected input shows the same items again."""
        _, transport = server
        reply = converse(transport, "hi", "00", "x")
        assert "3.Basket" in reply
        assert "1.Weather" not in reply

    def test_more_alias(self, tree_builder):
        """More names the remaining items with the node's alias."""
        tree = tree_builder(
            MenuNode(name="main", title="Stalls", page_size=2, children_alias="stalls"),
            MenuNode(name="a", title="A", parent="main"),
            MenuNode(name="b", title="B", parent="main"),
            MenuNode(name="c", title="C", parent="main"),
        )
        transport = MockTransport()
        MenuServer(tree, transport, Config()).start()

        assert converse(transport, "hi") == "Stalls\n1.A\n2.B\n0.Exit\n00.More(1 stalls)"
        assert converse(transport, "00") == "Stalls\n3.C\n0.Exit"


class TestServerOptions:
    """Tests for configuration-dependent behavior."""

    def test_exit_disabled(self, menu_file):
        """Without exit, pages omit it and 0 is rejected."""
        transport = MockTransport()
        MenuServer(load_menu_tree(menu_file), transport, Config(exit_enabled=False)).start()

        page = "Main Menu\n1.Weather\n2.Market\n3.Basket\n4.Nothing here"
        assert converse(transport, "hi") == page
        assert converse(transport, "0") == "Exit is not available\n" + page

    def test_custom_separator(self, menu_file):
        """Lines are joined with the configured separator."""
        transport = MockTransport()
        MenuServer(load_menu_tree(menu_file), transport, Config(separator=" | ")).start()

        reply = converse(transport, "hi", "1")
        assert reply == "Weather | 1.Forecast | 2.Warnings | 0.Exit | #.Back"

    def test_expired_session_starts_over(self, menu_file):
        """A session idle past the timeout is forgotten."""
        transport = MockTransport()
        srv = MenuServer(load_menu_tree(menu_file), transport, Config(session_timeout_minutes=0))
        srv.start()

        transport.simulate_message("!node1", "hi")
        srv.session_manager._sessions["!node1"].last_access -= 1

        assert converse(transport, "1") == ROOT_PAGE


class TestTermination:
    """Tests for kill policies and missing nodes."""

    def test_kill_policy(self, tree_builder):
        """A node whose kill policy triggers ends the session."""
        tree = tree_builder(
            MenuNode(name="main", title="Main Menu"),
            MenuNode(
                name="admin",
                title="Admin",
                parent="main",
                termination=TerminationPolicy(
                    kill_predicate=lambda data: True,
                    kill_message="Access denied",
                ),
            ),
        )
        transport = MockTransport()
        srv = MenuServer(tree, transport, Config())
        srv.start()

        assert converse(transport, "hi", "1") == "Access denied"
        assert srv.session_manager.find_session("!node1") is None

    def test_kill_on_selected_variables(self, tree_builder):
        """Kill conditions can match multi-selected items."""
        tree = tree_builder(
            MenuNode(name="main", title="Shop", multi_select=True, multi_select_child="checkout"),
            MenuNode(name="eggs", title="Eggs", parent="main"),
            MenuNode(name="bread", title="Bread", parent="main"),
            MenuNode(
                name="checkout",
                title="Checkout",
                parent="main",
                termination=TerminationPolicy(
                    kill_predicate=kill_when({"main": ("eggs",)}),
                    kill_message="Eggs are sold out",
                ),
            ),
        )
        transport = MockTransport()
        MenuServer(tree, transport, Config()).start()

        assert converse(transport, "hi", "1") == "Eggs are sold out"
        assert converse(transport, "hi", "1,2").startswith("Checkout\n")

    def test_missing_node_ends_session(self):
        """A child that can't be resolved ends the session."""
        tree = MenuTree()
        tree.add(MenuNode(name="main", title="Main Menu", children=("ghost",)))
        transport = MockTransport()
        srv = MenuServer(tree, transport, Config())
        srv.start()

        assert converse(transport, "hi") == SERVICE_UNAVAILABLE_MESSAGE
        assert srv.session_manager.find_session("!node1") is None


class FailingResolver(VariableResolver):
    """Resolver that fails on pages containing a given word."""

    def __init__(self, word: str):
        self.word = word

    def substitute(self, text: str, session_address: str) -> str:
        if self.word in text:
            raise RuntimeError(f"cannot render {self.word}")
        return text


class TestRenderFailure:
    """Tests for unexpected errors while rendering."""

    @pytest.fixture
    def server(self, tree_builder):
        """Server whose resolver fails on the Shop page."""
        tree = tree_builder(
            MenuNode(name="main", title="Main Menu"),
            MenuNode(name="shop", title="Shop", parent="main"),
            MenuNode(name="eggs", title="Eggs", parent="shop"),
        )
        transport = MockTransport()
        srv = MenuServer(tree, transport, Config(), resolver=FailingResolver("Shop"))
        srv.start()
        return srv, transport

    def test_error_reply(self, server):
        """A failing render replies with the error."""
        _, transport = server
        assert converse(transport, "hi", "1") == "Error: cannot render Shop"

    def test_failed_navigation_not_stored(self, server):
        """A failing render leaves the session where it was."""
        srv, transport = server
        converse(transport, "hi", "1")
        assert srv.session_manager.find_session("!node1").path == ("main",)

    def test_failure_on_first_message_leaves_no_session(self, tree_builder):
        """A new session that fails to render is not kept."""
        tree = tree_builder(MenuNode(name="main", title="Shop"))
        transport = MockTransport()
        srv = MenuServer(tree, transport, Config(), resolver=FailingResolver("Shop"))
        srv.start()

        assert converse(transport, "hi") == "Error: cannot render Shop"
        assert srv.session_manager.find_session("!node1") is None
