"""
Abstract transport protocol definition.

This module defines the interface that all transports must follow.
"""

import threading
from typing import Optional, Protocol, runtime_checkable

from boxsync.protocol.types import ServiceReply, ServiceRequest


@runtime_checkable
class TransportProtocol(Protocol):
    """
    Protocol defining the transport interface.

    Implementations carry ServiceRequests to the service and hand the
    replies back as ServiceReplies.  Errors on the wire are raised, not
    translated into statuses.
    """

    def execute(self, request: ServiceRequest) -> ServiceReply:
        """
        Execute a web method call and return the reply.

        Args:
            request: The ServiceRequest to execute

        Returns:
            ServiceReply with status text and outputs
        """
        ...

    def submit_credentials(self, ticket: str, login: str, password: str) -> str:
        """
        Post login and password to the authorization page of a ticket.

        Returns:
            The body of the page, empty if the service sent nothing back
        """
        ...

    def upload_file(
        self,
        auth_token: str,
        target_id: int,
        path: str,
        cancel_event: Optional[threading.Event] = None,
        action: str = "upload",
    ) -> bytes:
        """
        Send one file as multipart POST.

        Args:
            target_id: the folder for "upload", the file to replace or
                to copy for "overwrite" and "new_copy"
            action: upload, overwrite or new_copy

        Raises:
            UploadCancelledError: if cancel_event got set during the transfer

        Returns:
            The raw XML confirmation
        """
        ...

    def close(self) -> None:
        """Close any resources (e.g., HTTP session)."""
        ...
