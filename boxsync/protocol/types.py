"""
Core protocol types for the sans-I/O Box.NET implementation.

These dataclasses describe a web method call and the service's reply,
independent of how the call is carried over the network.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from boxsync.lib import error
from boxsync.objects import ObjectType

OBJECT_TYPE_TOKENS: dict[ObjectType, str] = {
    ObjectType.FILE: "file",
    ObjectType.FOLDER: "folder",
}


def object_type_to_string(object_type: Any, method: str | None = None) -> str:
    """
    Map an ObjectType to the token the service expects.

    Raises:
        NotSupportedObjectTypeError: for anything but FILE and FOLDER
    """
    try:
        return OBJECT_TYPE_TOKENS[object_type]
    except (KeyError, TypeError):
        raise error.NotSupportedObjectTypeError(object_type, method)


@dataclass(frozen=True)
class ServiceRequest:
    """
    A web method call to be made.

    This is a pure data structure with no I/O.  It describes which
    call should be made, but does not make it.

    Attributes:
        method: web method name (get_ticket, create_folder, ...)
        params: parameters, including api_key and auth_token.  List
            values are sent as arrays.
    """

    method: str
    params: dict[str, Any] = field(default_factory=dict)

    def with_param(self, name: str, value: Any) -> "ServiceRequest":
        """Return new request with an additional parameter."""
        return ServiceRequest(method=self.method, params={**self.params, name: value})


@dataclass(frozen=True)
class ServiceReply:
    """
    The service's answer to a web method call.

    Attributes:
        status: the short status text (create_ok, not_logged_in, ...)
        outputs: method specific output values.  Plain values are
            strings, binary payloads (folder trees, tag exports) bytes,
            and structures (user, folder, file info) dicts of strings.
        raw: the reply as received, for diagnostics
    """

    status: str
    outputs: dict[str, Any] = field(default_factory=dict)
    raw: bytes = b""

    def output(self, name: str, default: Any = None) -> Any:
        return self.outputs.get(name, default)
