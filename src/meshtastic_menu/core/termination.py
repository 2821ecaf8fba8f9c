"""Per-node kill and end-of-path hooks."""

from dataclasses import dataclass
from typing import Any, Callable, Mapping

KILL_MESSAGE = "Your session has been terminated."
NODE_END_EVENT_MESSAGE = "Thank you. Your session has ended."

KillPredicate = Callable[[Mapping[str, Any]], bool]
EndHandler = Callable[[Mapping[str, Any]], str]


@dataclass(frozen=True)
class TerminationPolicy:
    """Decides when a session ends at a node and what it is told.

    Attributes:
        kill_predicate: Called with the session variables before the node is
            shown. Returning True kills the session. None never kills.
        kill_message: Text sent when the session is killed.
        end_handler: Called with the session variables when the session ends
            at this node. None falls back to the generic end message.
    """

    kill_predicate: KillPredicate | None = None
    kill_message: str = KILL_MESSAGE
    end_handler: EndHandler | None = None

    def should_kill(self, data: Mapping[str, Any]) -> bool:
        """Check whether the session should be killed at this node."""
        if self.kill_predicate is None:
            return False
        return bool(self.kill_predicate(data))

    def end_message(self, data: Mapping[str, Any]) -> str:
        """Get the message shown when a session or path ends here."""
        if self.end_handler is None:
            return NODE_END_EVENT_MESSAGE
        return self.end_handler(data)

    @property
    def ends_path(self) -> bool:
        """True when reaching this node (as a leaf) ends the session."""
        return self.end_handler is not None


def static_end(message: str) -> EndHandler:
    """Build an end handler that always returns the same message."""
    return lambda data: message


def kill_when(conditions: Mapping[str, Any]) -> KillPredicate:
    """Build a kill predicate matching every key/value in conditions."""
    expected = dict(conditions)
    return lambda data: all(data.get(key) == value for key, value in expected.items())
