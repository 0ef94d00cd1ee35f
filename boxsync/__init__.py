#!/usr/bin/env python
import logging

__version__ = "0.3.0"

from .manager import BoxManager, PendingUpload, get_boxmanager
from .objects import (
    Comment,
    File,
    Folder,
    FolderBase,
    GetUpdatesOptions,
    ObjectType,
    RetrieveFolderStructureOptions,
    TagPrimitive,
    TagPrimitiveCollection,
    Update,
    User,
)
from .response import OperationResponse

# Silence notification of no default logging handler
log = logging.getLogger("boxsync")
log.addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "BoxManager",
    "PendingUpload",
    "get_boxmanager",
    "Comment",
    "File",
    "Folder",
    "FolderBase",
    "GetUpdatesOptions",
    "ObjectType",
    "RetrieveFolderStructureOptions",
    "TagPrimitive",
    "TagPrimitiveCollection",
    "Update",
    "User",
    "OperationResponse",
]
