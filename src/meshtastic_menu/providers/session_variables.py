"""Variable resolvers for rendered menu text."""

import logging
import re

from ..core.session_manager import SessionManager
from ..interfaces import VariableResolver

logger = logging.getLogger(__name__)


class NullVariableResolver(VariableResolver):
    """Resolver that leaves text untouched."""

    def substitute(self, text: str, session_address: str) -> str:
        return text


class SessionVariableResolver(VariableResolver):
    """Replaces ``{name}`` placeholders with values from the session.

    ``{address}`` always resolves to the session address. Unknown names are
    left in place, braces included.
    """

    PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")

    def __init__(self, session_manager: SessionManager):
        """
        Initialize the resolver.

        Args:
            session_manager: Source of the session variables.
        """
        self.session_manager = session_manager

    def substitute(self, text: str, session_address: str) -> str:
        """Replace known placeholders in text."""
        session = self.session_manager.find_session(session_address)
        values = dict(session.variables) if session else {}
        values.setdefault("address", session_address)

        def replace(match: re.Match) -> str:
            key = match.group(1)
            if key not in values:
                logger.debug(f"[{session_address}] Unresolved variable: {key}")
                return match.group(0)
            return _format_value(values[key])

        return self.PLACEHOLDER.sub(replace, text)


def _format_value(value) -> str:
    """Render a variable value as text."""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)
