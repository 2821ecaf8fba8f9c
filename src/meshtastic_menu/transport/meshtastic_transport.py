"""Meshtastic-based message transport."""

import logging
from typing import Callable
from pubsub import pub

from meshtastic import serial_interface, tcp_interface, ble_interface

from ..interfaces import MessageTransport

logger = logging.getLogger(__name__)

TEXT_TOPIC = "meshtastic.receive.text"


class MeshtasticTransport(MessageTransport):
    """Message transport using Meshtastic mesh network.

    Supports Serial, BLE, and TCP connection types. Each menu page is sent
    as a single direct text message.
    """

    def __init__(self, connection_type: str = "serial", device: str | None = None):
        """
        Initialize the transport.

        Args:
            connection_type: Type of connection - "serial", "ble", or "tcp".
            device: Device path, BLE address, or hostname depending on type.
                   If None, will auto-detect for serial connections.
        """
        self.connection_type = connection_type
        self.device = device
        self._interface = None
        self._callbacks: list[Callable[[str, str], None]] = []

    def send(self, address: str, message: str) -> None:
        """
        Send a text message to a node.

        Args:
            address: The destination node ID (e.g., "!abcd1234").
            message: The message text to send.

        Raises:
            RuntimeError: If not connected.
        """
        if self._interface is None:
            raise RuntimeError("Not connected. Call connect() first.")

        logger.debug(f"[{address}] Sending {len(message)} chars")
        self._interface.sendText(message, destinationId=address)

    def on_message(self, callback: Callable[[str, str], None]) -> None:
        """
        Register a callback for incoming messages.

        The callback receives (address, message_text).

        Args:
            callback: Function to call when a message is received.
        """
        self._callbacks.append(callback)

    def connect(self) -> None:
        """
        Connect to the Meshtastic device.

        Creates the appropriate interface based on connection_type.

        Raises:
            ValueError: If connection_type is not recognised.
        """
        if self.connection_type == "serial":
            self._interface = serial_interface.SerialInterface(devPath=self.device)
        elif self.connection_type == "ble":
            self._interface = ble_interface.BLEInterface(address=self.device)
        elif self.connection_type == "tcp":
            self._interface = tcp_interface.TCPInterface(hostname=self.device)
        else:
            raise ValueError(f"Unknown connection type: {self.connection_type}")

        pub.subscribe(self._handle_receive, TEXT_TOPIC)
        logger.info(f"Connected to Meshtastic over {self.connection_type}")

    def disconnect(self) -> None:
        """Disconnect from the Meshtastic device."""
        if self._interface is None:
            return

        if pub.isSubscribed(self._handle_receive, TEXT_TOPIC):
            pub.unsubscribe(self._handle_receive, TEXT_TOPIC)

        self._interface.close()
        self._interface = None
        logger.info("Disconnected from Meshtastic")

    def is_connected(self) -> bool:
        """Check if currently connected."""
        return self._interface is not None

    def _handle_receive(self, packet: dict, interface) -> None:
        """
        Handle received packets from Meshtastic.

        Extracts text messages and calls registered callbacks.

        Args:
            packet: The received packet dictionary.
            interface: The Meshtastic interface (unused but required by pubsub).
        """
        from_id = packet.get("fromId")
        text = packet.get("decoded", {}).get("text")

        if not from_id or not text:
            return

        for callback in self._callbacks:
            try:
                callback(from_id, text)
            except Exception:
                # One failing callback must not stop the others
                logger.exception(f"[{from_id}] Message callback failed")
