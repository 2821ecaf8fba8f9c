"""Pytest configuration and fixtures."""

import pytest

from meshtastic_menu.core import MenuNode, MenuTree
from meshtastic_menu.core.termination import TerminationPolicy, static_end


SAMPLE_MENU_YAML = """
menu:
  nodes:
    - name: main
      title: Main Menu
    - name: weather
      title: Weather
      parent: main
    - name: forecast
      title: Forecast
      parent: weather
      end_message: Sunny all day
    - name: warnings
      title: Warnings
      parent: weather
    - name: market
      title: Market
      parent: main
      multi_select: true
      multi_select_child: basket
    - name: eggs
      title: Eggs
      parent: market
    - name: bread
      title: Bread
      parent: market
    - name: honey
      title: Honey
      parent: market
    - name: basket
      title: Basket
      parent: main
      displayed_title: "Basket: {market}"
    - name: empty
      title: Nothing here
      parent: main
"""


def build_tree(*nodes: MenuNode) -> MenuTree:
    """Build a MenuTree from nodes given parents first."""
    tree = MenuTree()
    for node in nodes:
        tree.add(node)
    tree.validate()
    return tree


@pytest.fixture
def tree_builder():
    """Factory building a validated MenuTree from nodes."""
    return build_tree


@pytest.fixture
def sample_tree():
    """A small tree: main -> (weather -> forecast, warnings), news, empty."""
    return build_tree(
        MenuNode(name="main", title="Main Menu"),
        MenuNode(name="weather", title="Weather", parent="main"),
        MenuNode(
            name="forecast",
            title="Forecast",
            parent="weather",
            termination=TerminationPolicy(end_handler=static_end("Sunny all day")),
        ),
        MenuNode(name="warnings", title="Warnings", parent="weather"),
        MenuNode(name="news", title="News", parent="main"),
        MenuNode(name="empty", title="Nothing here", parent="main"),
    )


@pytest.fixture
def menu_file(tmp_path):
    """Write the sample YAML menu to a temporary file."""
    path = tmp_path / "menu.yaml"
    path.write_text(SAMPLE_MENU_YAML)
    return path
