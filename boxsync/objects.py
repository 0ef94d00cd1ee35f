#!/usr/bin/env python
"""
Plain data objects handed out by the library: users, tags, folders and
files.  None of them talks to the service by itself, but User and
TagPrimitive may hold a fetch function (see boxsync.lib.lazy) which the
manager injects, so that details can be looked up when first needed.
"""
from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from enum import Enum
from enum import IntFlag
from typing import Callable
from typing import Iterable
from typing import Iterator
from typing import List
from typing import Optional

from boxsync.lib.lazy import LazyField


class ObjectType(Enum):
    FILE = 1
    FOLDER = 2


class RetrieveFolderStructureOptions(IntFlag):
    NONE = 0
    NO_FILES = 1
    NO_ZIP = 2
    ONE_LEVEL = 4

    def contains(self, options: "RetrieveFolderStructureOptions") -> bool:
        return (self & options) == options

    def to_string_list(self) -> List[str]:
        """The tokens the service expects in the params array"""
        result = []
        if self.contains(RetrieveFolderStructureOptions.NO_FILES):
            result.append("nofiles")
        if self.contains(RetrieveFolderStructureOptions.NO_ZIP):
            result.append("nozip")
        if self.contains(RetrieveFolderStructureOptions.ONE_LEVEL):
            result.append("onelevel")
        return result


class GetUpdatesOptions(IntFlag):
    NONE = 0
    NO_ZIP = 1

    def contains(self, options: "GetUpdatesOptions") -> bool:
        return (self & options) == options

    def to_string_list(self) -> List[str]:
        if self.contains(GetUpdatesOptions.NO_ZIP):
            return ["nozip"]
        return []


class User:
    """
    A Box.NET account.

    Users found while decoding a folder tree only know their ID.  They
    are created through User.deferred and fetch the rest of the account
    details the first time email or login is read.
    """

    def __init__(
        self,
        id: int = 0,
        email: Optional[str] = None,
        login: Optional[str] = None,
        access_id: int = 0,
        max_upload_size: int = 0,
        space_amount: int = 0,
        space_used: int = 0,
    ) -> None:
        self.id = id
        self._email = email
        self._login = login
        self.access_id = access_id
        self.max_upload_size = max_upload_size
        self.space_amount = space_amount
        self.space_used = space_used
        self._details: Optional[LazyField[int, Optional[User]]] = None

    @classmethod
    def deferred(
        cls, user_id: int, materialize: Callable[[int], Optional["User"]]
    ) -> "User":
        user = cls(id=user_id)

        def fetch(key: int) -> Optional[User]:
            details = materialize(key)
            if details is not None:
                user._initialize(details)
            return details

        user._details = LazyField(key=user_id, fetch=fetch)
        return user

    def _initialize(self, other: "User") -> None:
        self._email = other.email
        self._login = other.login
        self.access_id = other.access_id
        self.max_upload_size = other.max_upload_size
        self.space_amount = other.space_amount
        self.space_used = other.space_used

    def _materialize(self) -> None:
        if self._details is not None:
            self._details.value

    @property
    def is_materialized(self) -> bool:
        return self._details is None or self._details.is_resolved

    @property
    def email(self) -> Optional[str]:
        self._materialize()
        return self._email

    @property
    def login(self) -> Optional[str]:
        self._materialize()
        return self._login

    def __eq__(self, other: object) -> bool:
        return isinstance(other, User) and other.id == self.id

    def __hash__(self) -> int:
        return hash(("user", self.id))

    def __repr__(self) -> str:
        if self.is_materialized:
            return f"User(id={self.id}, login={self._login!r})"
        return f"User(id={self.id}, not materialized)"


class TagPrimitive:
    def __init__(
        self,
        id: int,
        text: Optional[str] = None,
        materialize: Optional[Callable[[int], Optional["TagPrimitive"]]] = None,
    ) -> None:
        self.id = id
        if text is None and materialize is not None:

            def fetch(key: int) -> str:
                tag = materialize(key)
                return tag.text if tag is not None else ""

            self._text = LazyField(key=id, fetch=fetch)
        else:
            self._text = LazyField.resolved(text or "")

    @property
    def text(self) -> str:
        return self._text.value

    @text.setter
    def text(self, value: Optional[str]) -> None:
        self._text = LazyField.resolved(value or "")

    @property
    def is_materialized(self) -> bool:
        return self._text.is_resolved

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TagPrimitive) and other.id == self.id

    def __hash__(self) -> int:
        return hash(("tag", self.id))

    def __repr__(self) -> str:
        return f"TagPrimitive(id={self.id}, text={self._text.peek()!r})"


class TagPrimitiveCollection:
    """Ordered collection of tags, looked up by ID"""

    def __init__(self, tags: Iterable[TagPrimitive] = ()) -> None:
        self._tags: List[TagPrimitive] = list(tags)

    def add(self, tag: TagPrimitive) -> None:
        self._tags.append(tag)

    def get_tag(self, id: int) -> Optional[TagPrimitive]:
        for tag in self._tags:
            if tag.id == id:
                return tag
        return None

    @property
    def is_empty(self) -> bool:
        return not self._tags

    def to_id_string(self) -> str:
        """Comma separated tag IDs, the way add_to_mybox wants them"""
        return ",".join(str(tag.id) for tag in self._tags)

    def __iter__(self) -> Iterator[TagPrimitive]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __getitem__(self, index: int) -> TagPrimitive:
        return self._tags[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagPrimitiveCollection):
            return NotImplemented
        return [(t.id, t.text) for t in self] == [(t.id, t.text) for t in other]

    def __repr__(self) -> str:
        return f"TagPrimitiveCollection({self._tags!r})"


@dataclass
class FolderBase:
    id: int = 0
    name: Optional[str] = None
    owner_id: Optional[int] = None
    folder_type_id: Optional[int] = None
    parent_folder_id: Optional[int] = None
    password: Optional[str] = None
    path: Optional[str] = None
    public_name: Optional[str] = None
    is_shared: bool = False


@dataclass
class File:
    """
    A file as found in a folder tree, in an upload confirmation or in a
    get_file_info reply.  owner and tags are lazy (see User.deferred and
    TagPrimitive) and left out of comparisons.
    """

    id: int = 0
    name: Optional[str] = None
    folder_id: Optional[int] = None
    size: Optional[int] = None
    is_shared: Optional[bool] = None
    public_name: Optional[str] = None
    shared_link: Optional[str] = None
    description: Optional[str] = None
    keyword: Optional[str] = None
    sha1_hash: Optional[str] = None
    created: Optional[datetime] = None
    updated: Optional[datetime] = None
    owner_id: Optional[int] = None
    tag_ids: List[int] = field(default_factory=list)
    owner: Optional[User] = field(default=None, compare=False, repr=False)
    tags: List[TagPrimitive] = field(default_factory=list, compare=False, repr=False)

    def __hash__(self) -> int:
        return hash(("file", self.id))


@dataclass
class Folder(FolderBase):
    folders: List["Folder"] = field(default_factory=list)
    files: List[File] = field(default_factory=list)
    tag_ids: List[int] = field(default_factory=list)
    owner: Optional[User] = field(default=None, compare=False, repr=False)
    tags: List[TagPrimitive] = field(default_factory=list, compare=False, repr=False)

    def walk(self) -> Iterator["Folder"]:
        """This folder and all folders below it, depth first"""
        yield self
        for folder in self.folders:
            yield from folder.walk()


@dataclass
class Comment:
    id: int = 0
    text: Optional[str] = None
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_on: Optional[datetime] = None
    reply_comments: List["Comment"] = field(default_factory=list)


@dataclass
class Update:
    """
    One entry of the account's change log, as returned by get_updates:
    who did what (update_type: added, moved, shared, ...) to which files
    and folders, below which folder and when.
    """

    id: int = 0
    update_type: Optional[str] = None
    updated: Optional[datetime] = None
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    folder_id: Optional[int] = None
    folder_name: Optional[str] = None
    is_shared: bool = False
    public_name: Optional[str] = None
    owner_id: Optional[int] = None
    files: List[File] = field(default_factory=list)
    folders: List[FolderBase] = field(default_factory=list)
