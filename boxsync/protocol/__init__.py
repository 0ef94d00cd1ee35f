"""
Sans-I/O Box.NET protocol implementation.

This module provides protocol-level operations without any I/O.
It builds requests and parses replies as pure data transformations.

The protocol layer is organized into:
- types: Core data structures (ServiceRequest, ServiceReply)
- methods: The web methods, with their status families
- status_parsers: Status strings to status enums
- message_parsers: Upload confirmations, tag exports, folder trees and
  update logs
- xml_parsers: The REST reply envelope
- operations: BoxProtocol, building the requests

Example usage:

    from boxsync.protocol import BoxProtocol

    protocol = BoxProtocol(api_key="...")

    # Build a request (no I/O)
    request = protocol.export_tags_request(auth_token)

    # Execute via a transport
    reply = transport.execute(request)

    # Parse reply (no I/O)
    status = methods.EXPORT_TAGS.parse_status(reply.status)
    tags = parse_export_tags(reply.output("tag_xml"))
"""

from .types import (
    ServiceReply,
    ServiceRequest,
    object_type_to_string,
)
from .methods import WEB_METHODS, WebMethod
from .status_parsers import parse_status
from .message_parsers import (
    parse_export_tags,
    parse_folder_structure,
    parse_updates,
    parse_upload_response,
    unzip,
)
from .xml_parsers import parse_service_reply
from .operations import BoxProtocol

__all__ = [
    # Request/Reply
    "ServiceRequest",
    "ServiceReply",
    "object_type_to_string",
    # Web methods
    "WebMethod",
    "WEB_METHODS",
    # Parsers
    "parse_status",
    "parse_export_tags",
    "parse_folder_structure",
    "parse_updates",
    "parse_upload_response",
    "unzip",
    "parse_service_reply",
    # Protocol
    "BoxProtocol",
]
