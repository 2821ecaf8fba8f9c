"""Command parser for interpreting user input."""

from abc import ABC
from dataclasses import dataclass


class Command(ABC):
    """Base class for all commands."""

    pass


@dataclass(frozen=True)
class SelectCommand(Command):
    """Command to select an item by number."""

    index: int


@dataclass(frozen=True)
class MultiSelectCommand(Command):
    """Command to select several items at once."""

    indices: tuple[int, ...]


@dataclass(frozen=True)
class ExitCommand(Command):
    """Command to end the session."""

    pass


@dataclass(frozen=True)
class BackCommand(Command):
    """Command to go back to the parent menu."""

    pass


@dataclass(frozen=True)
class MoreCommand(Command):
    """Command to get the next page of the current menu."""

    pass


@dataclass(frozen=True)
class HomeCommand(Command):
    """Command to go to the root menu."""

    pass


@dataclass(frozen=True)
class InvalidCommand(Command):
    """Represents an invalid or unrecognized command."""

    original_input: str
    reason: str = "Unknown command"


class CommandParser:
    """Parses user input strings into Command objects.

    Inputs mirror the affordance lines of a rendered page: item numbers,
    "0" for Exit, "#" for Back and "00" for More.
    """

    EXIT_COMMANDS = {"0"}
    BACK_COMMANDS = {"#"}
    MORE_COMMANDS = {"00"}
    HOME_COMMANDS = {"*"}

    def __init__(self, delimiter: str = ","):
        """
        Initialize the parser.

        Args:
            delimiter: Separator between items of a multi-selection.
        """
        self.delimiter = delimiter

    def parse(self, input_str: str, multi_select: bool = False) -> Command:
        """
        Parse a user input string into a Command object.

        Args:
            input_str: The raw input string from the user.
            multi_select: Whether the current menu accepts several
                delimiter-separated selections.

        Returns:
            A Command object representing the parsed input.
        """
        cleaned = input_str.strip()

        if not cleaned:
            return InvalidCommand(
                original_input=input_str, reason="Empty input"
            )

        # Check navigation commands before numbers ("0" and "00" are digits)
        if cleaned in self.MORE_COMMANDS:
            return MoreCommand()

        if cleaned in self.EXIT_COMMANDS:
            return ExitCommand()

        if cleaned in self.BACK_COMMANDS:
            return BackCommand()

        if cleaned in self.HOME_COMMANDS:
            return HomeCommand()

        if multi_select and self.delimiter in cleaned:
            return self._parse_multi(input_str, cleaned)

        if not cleaned.isdecimal():
            return InvalidCommand(
                original_input=input_str, reason="Unknown command"
            )

        number = int(cleaned)
        if number < 1:
            return InvalidCommand(
                original_input=input_str,
                reason="Selection must be positive",
            )
        return SelectCommand(index=number)

    def _parse_multi(self, input_str: str, cleaned: str) -> Command:
        """Parse a delimiter-separated list of selections."""
        parts = [part.strip() for part in cleaned.split(self.delimiter)]
        parts = [part for part in parts if part]

        if not parts or not all(part.isdecimal() for part in parts):
            return InvalidCommand(
                original_input=input_str, reason="Invalid multi-selection"
            )

        indices = tuple(int(part) for part in parts)
        if any(index < 1 for index in indices):
            return InvalidCommand(
                original_input=input_str,
                reason="Selection must be positive",
            )

        # Keep first occurrence order, drop repeats
        return MultiSelectCommand(indices=tuple(dict.fromkeys(indices)))
