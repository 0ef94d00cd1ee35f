#!/usr/bin/env python
import logging
from typing import Any
from typing import Optional

from boxsync import __version__

debug_dump_communication = False
try:
    import os

    ## Environmental variables prepended with "PYTHON_BOXSYNC" are used for debug purposes,
    ## environmental variables prepended with "BOXSYNC_" are for connection parameters
    debug_dump_communication = os.environ.get("PYTHON_BOXSYNC_COMMDUMP", False)
    ## one of DEBUG_PDB, DEBUG, DEVELOPMENT, PRODUCTION
    debugmode = os.environ["PYTHON_BOXSYNC_DEBUGMODE"]
except KeyError:
    if "dev" in __version__ or __version__ == "(unknown)":
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("boxsync")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def weirdness(*reasons: Any) -> None:
    """Logs a deviation from what the service is expected to send"""
    from boxsync.lib.debug import xmlstring

    reason = " : ".join([xmlstring(x) for x in reasons])
    log.warning(f"Deviation from expectations found: {reason}")
    if debugmode == "DEBUG_PDB":
        log.error(f"Dropping into debugger due to {reason}")
        import pdb

        pdb.set_trace()


class BoxError(Exception):
    method: Optional[str] = None
    reason: str = "no reason"

    def __init__(
        self, method: Optional[str] = None, reason: Optional[str] = None
    ) -> None:
        if method:
            self.method = method
        if reason:
            self.reason = reason

    def __str__(self) -> str:
        return "%s in '%s', reason %s" % (
            self.__class__.__name__,
            self.method,
            self.reason,
        )


class ArgumentError(BoxError, ValueError):
    """
    A required argument (typically a completion callback) was missing.
    Raised before anything is sent to the service.
    """

    pass


class NotSupportedObjectTypeError(BoxError):
    """
    The object type given is neither a file nor a folder.  There is no
    string token for it, so the operation is rejected before any
    request is made.
    """

    def __init__(self, object_type: Any, method: Optional[str] = None) -> None:
        self.object_type = object_type
        super().__init__(method, f"object type {object_type!r} is not supported")


class UploadCancelledError(BoxError):
    """The file transfer was cancelled before it finished"""

    pass


class ResponseError(BoxError):
    """The service replied with something that isn't a service reply at all"""

    pass


class AuthorizationError(BoxError):
    """
    The service replied with HTTP 401 or 403.  The method property
    holds the web method or url in question, the reason property
    the excuse the server sent.
    """

    pass
