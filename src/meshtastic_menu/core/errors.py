"""Exceptions raised by the menu core."""


class MenuError(Exception):
    """Base class for menu errors."""

    pass


class NodeNotFoundError(MenuError):
    """Raised when a node name cannot be resolved in a session's tree."""

    def __init__(self, name: str):
        super().__init__(f"Menu node not found: {name}")
        self.name = name


class MenuConfigError(MenuError):
    """Raised when a menu tree or menu file is invalid."""

    pass
