"""Abstract interface for message transport."""

from abc import ABC, abstractmethod
from typing import Callable


class MessageTransport(ABC):
    """Abstract interface for sending/receiving messages.

    Delivery is fire-and-forget; acknowledgements and retries are left to
    the underlying network.
    """

    @abstractmethod
    def send(self, address: str, message: str) -> None:
        """Send a message to a session address.

        Args:
            address: The destination address (e.g. a Meshtastic node ID).
            message: The message text to send.
        """
        pass

    @abstractmethod
    def on_message(self, callback: Callable[[str, str], None]) -> None:
        """Register a callback for incoming messages.

        The callback receives (address, message).
        """
        pass

    @abstractmethod
    def connect(self) -> None:
        """Connect to the transport."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the transport."""
        pass
