"""Message transports."""

from .meshtastic_transport import MeshtasticTransport

__all__ = ["MeshtasticTransport"]
