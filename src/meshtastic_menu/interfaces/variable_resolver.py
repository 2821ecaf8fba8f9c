"""Abstract interface for template variable substitution."""

from abc import ABC, abstractmethod


class VariableResolver(ABC):
    """Abstract interface for rewriting placeholders in rendered text."""

    @abstractmethod
    def substitute(self, text: str, session_address: str) -> str:
        """Replace placeholder tokens using session-scoped values.

        Unresolved placeholders must be returned unchanged; substitution
        never fails a render.

        Args:
            text: Rendered page text.
            session_address: Address of the session being rendered.

        Returns:
            The text with known placeholders replaced.
        """
        pass
