"""
Transport layer for the Box.NET protocol.

The transport is intentionally thin - it only carries requests over
HTTP.  All protocol logic (building requests, parsing payloads) is in
boxsync.protocol.

Example:
    from boxsync.protocol import BoxProtocol
    from boxsync.io import RestTransport

    protocol = BoxProtocol(api_key="...")
    with RestTransport() as transport:
        reply = transport.execute(protocol.get_ticket_request())
"""

from .base import TransportProtocol
from .rest import RestTransport

__all__ = [
    # Protocols
    "TransportProtocol",
    # Implementations
    "RestTransport",
]
