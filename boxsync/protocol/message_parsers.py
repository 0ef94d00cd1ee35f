"""
Pure functions decoding the payloads of service replies.

Upload confirmations, tag exports, folder trees and update logs arrive
as XML (trees and update logs possibly zipped).  None of these parsers raise on bad
input: a malformed document gives an empty result and a log line.

Owner and tag fields of tree nodes are not looked up here.  The caller
passes materialize functions which get bound into the nodes, and which
run only when somebody reads the field.
"""

from __future__ import annotations

import io
import logging
import zipfile
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from lxml import etree
from lxml.etree import _Element

from boxsync.objects import (
    Comment,
    File,
    Folder,
    FolderBase,
    TagPrimitive,
    TagPrimitiveCollection,
    Update,
    User,
)
from boxsync.response import UploadResult
from boxsync.statuses import StatusEnum, UploadFileStatus

from .status_parsers import parse_status, parse_upload_file_error

log = logging.getLogger(__name__)

MaterializeUser = Callable[[int], Optional[User]]
MaterializeTag = Callable[[int], Optional[TagPrimitive]]


def _parse_xml(body: bytes | str, huge_tree: bool = False) -> _Element | None:
    if not body:
        return None
    if isinstance(body, str):
        body = body.encode("utf-8")
    parser = etree.XMLParser(huge_tree=huge_tree)
    try:
        return etree.fromstring(body, parser)
    except etree.XMLSyntaxError as e:
        log.warning(f"could not parse service payload: {e}")
        return None


def _to_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_bool(value: Any) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes")


def _to_datetime(value: Any) -> Optional[datetime]:
    """Unix timestamps as sent by the service, interpreted as UTC"""
    seconds = _to_int(value)
    if seconds is None:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def _tag_ids(element: _Element) -> list[int]:
    tags = element.find("tags")
    if tags is None:
        return []
    ids = (_to_int(tag.get("id")) for tag in tags.findall("tag"))
    return [i for i in ids if i is not None]


def unzip(data: bytes) -> bytes:
    """
    Return the contents of the first entry of a ZIP archive.

    An empty archive, a directory as first entry or something that is
    not a ZIP archive at all gives b"".
    """
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            entries = archive.infolist()
            if not entries:
                log.warning("zip archive without entries")
                return b""
            first = entries[0]
            if first.is_dir():
                log.warning(f"first zip entry {first.filename} is a directory")
                return b""
            return archive.read(first)
    except (zipfile.BadZipFile, OSError, EOFError) as e:
        log.warning(f"could not unzip service payload: {e}")
        return b""


def parse_upload_response(
    body: bytes | str,
    folder_id: Optional[int] = None,
    huge_tree: bool = False,
    status_type: type[StatusEnum] = UploadFileStatus,
) -> tuple[StatusEnum, UploadResult]:
    """
    Parse the reply to a multipart upload, overwrite or new_copy.

    Example of a reply:

        <response>
          <status>upload_ok</status>
          <files>
            <file file_name="a.txt" id="1234" folder_id="0" shared="0"
                  public_name="" error=""/>
          </files>
        </response>

    Args:
        folder_id: the folder the files went to.  new_copy targets a
            file, so there it is left out and taken from the reply.
        status_type: the status family of the method that was called

    Returns:
        The status and the per file outcome.  Malformed replies give
        UNKNOWN and no files.
    """
    result = UploadResult(folder_id=folder_id or 0)
    root = _parse_xml(body, huge_tree)
    if root is None:
        return status_type.UNKNOWN, result
    status = parse_status(status_type, root.findtext("status"))
    for elem in root.iter("file"):
        uploaded = File(
            id=_to_int(elem.get("id"), 0),
            name=elem.get("file_name"),
            folder_id=_to_int(elem.get("folder_id"), folder_id),
            is_shared=_to_bool(elem.get("shared")),
            public_name=elem.get("public_name") or None,
        )
        if folder_id is None and uploaded.folder_id is not None:
            folder_id = uploaded.folder_id
            result.folder_id = folder_id
        result.uploaded_files[uploaded] = parse_upload_file_error(elem.get("error"))
    return status, result


def _field(elem: _Element, name: str) -> Optional[str]:
    ## the service sends update fields as attributes or as child elements
    value = elem.get(name)
    if value is None:
        value = elem.findtext(name)
    return value


def parse_updates(body: bytes | str, huge_tree: bool = False) -> list[Update]:
    """
    Decode the change log returned by get_updates (already unzipped).

        <updates>
          <update>
            <update_id>301</update_id>
            <user_id>7</user_id>
            <user_name>jo</user_name>
            <user_email>jo@example.com</user_email>
            <updated>1230000000</updated>
            <update_type>added</update_type>
            <folder_id>11</folder_id>
            <folder_name>Pictures</folder_name>
            <shared>0</shared>
            <shared_name></shared_name>
            <owner_id>7</owner_id>
            <files><file file_id="21" file_name="a.jpg"/></files>
            <folders/>
          </update>
        </updates>

    Returns:
        The updates in document order.  Malformed input gives [].
    """
    updates: list[Update] = []
    root = _parse_xml(body, huge_tree)
    if root is None:
        return updates
    for elem in root.iter("update"):
        folder_id = _to_int(_field(elem, "folder_id"))
        update = Update(
            id=_to_int(_field(elem, "update_id"), 0),
            update_type=_field(elem, "update_type") or None,
            updated=_to_datetime(_field(elem, "updated")),
            user_id=_to_int(_field(elem, "user_id")),
            user_name=_field(elem, "user_name") or None,
            user_email=_field(elem, "user_email") or None,
            folder_id=folder_id,
            folder_name=_field(elem, "folder_name") or None,
            is_shared=_to_bool(_field(elem, "shared")),
            public_name=_field(elem, "shared_name") or None,
            owner_id=_to_int(_field(elem, "owner_id")),
        )
        for child in elem.findall("files/file"):
            update.files.append(
                File(
                    id=_to_int(_field(child, "file_id"), 0),
                    name=_field(child, "file_name"),
                    folder_id=folder_id,
                )
            )
        for child in elem.findall("folders/folder"):
            update.folders.append(
                FolderBase(
                    id=_to_int(_field(child, "folder_id"), 0),
                    name=_field(child, "folder_name"),
                    parent_folder_id=folder_id,
                )
            )
        updates.append(update)
    return updates


def parse_export_tags(
    body: bytes | str, huge_tree: bool = False
) -> TagPrimitiveCollection:
    """
    <tags><tag id="34">books</tag><tag id="35">music</tag></tags>
    """
    collection = TagPrimitiveCollection()
    root = _parse_xml(body, huge_tree)
    if root is None:
        return collection
    for elem in root.iter("tag"):
        tag_id = _to_int(elem.get("id"))
        if tag_id is None:
            log.warning(f"skipping tag without id: {etree.tostring(elem)!r}")
            continue
        collection.add(TagPrimitive(tag_id, (elem.text or "").strip()))
    return collection


def _bind_owner(
    owner_id: Optional[int], materialize_user: Optional[MaterializeUser]
) -> Optional[User]:
    if owner_id is None:
        return None
    if materialize_user is None:
        return User(id=owner_id)
    return User.deferred(owner_id, materialize_user)


def _bind_tags(
    tag_ids: list[int], materialize_tag: Optional[MaterializeTag]
) -> list[TagPrimitive]:
    return [TagPrimitive(tag_id, materialize=materialize_tag) for tag_id in tag_ids]


def _parse_file_element(
    elem: _Element,
    folder_id: Optional[int],
    materialize_user: Optional[MaterializeUser],
    materialize_tag: Optional[MaterializeTag],
) -> File:
    owner_id = _to_int(elem.get("user_id"))
    tag_ids = _tag_ids(elem)
    return File(
        id=_to_int(elem.get("id"), 0),
        name=elem.get("file_name"),
        folder_id=folder_id,
        size=_to_int(elem.get("size")),
        is_shared=_to_bool(elem.get("shared")),
        public_name=elem.get("public_name") or None,
        shared_link=elem.get("shared_link") or None,
        description=elem.get("description") or None,
        keyword=elem.get("keyword") or None,
        sha1_hash=elem.get("sha1") or None,
        created=_to_datetime(elem.get("created")),
        updated=_to_datetime(elem.get("updated")),
        owner_id=owner_id,
        tag_ids=tag_ids,
        owner=_bind_owner(owner_id, materialize_user),
        tags=_bind_tags(tag_ids, materialize_tag),
    )


def _parse_folder_element(
    elem: _Element,
    parent_folder_id: Optional[int],
    materialize_user: Optional[MaterializeUser],
    materialize_tag: Optional[MaterializeTag],
) -> Folder:
    folder_id = _to_int(elem.get("id"), 0)
    owner_id = _to_int(elem.get("user_id"))
    tag_ids = _tag_ids(elem)
    folder = Folder(
        id=folder_id,
        name=elem.get("name"),
        owner_id=owner_id,
        parent_folder_id=parent_folder_id,
        public_name=elem.get("public_name") or None,
        is_shared=_to_bool(elem.get("shared")),
        tag_ids=tag_ids,
        owner=_bind_owner(owner_id, materialize_user),
        tags=_bind_tags(tag_ids, materialize_tag),
    )
    subfolders = elem.find("folders")
    if subfolders is not None:
        for child in subfolders.findall("folder"):
            folder.folders.append(
                _parse_folder_element(
                    child, folder_id, materialize_user, materialize_tag
                )
            )
    files = elem.find("files")
    if files is not None:
        for child in files.findall("file"):
            folder.files.append(
                _parse_file_element(child, folder_id, materialize_user, materialize_tag)
            )
    return folder


def parse_folder_structure(
    body: bytes | str,
    materialize_user: Optional[MaterializeUser] = None,
    materialize_tag: Optional[MaterializeTag] = None,
    huge_tree: bool = False,
) -> Folder:
    """
    Decode a folder tree as returned by get_account_tree.

    The document is either wrapped in <tree> or is a bare <folder>:

        <tree>
          <folder id="0" name="" shared="0" user_id="7">
            <tags><tag id="34"/></tags>
            <folders>
              <folder id="11" name="Pictures" shared="1" user_id="7"/>
            </folders>
            <files>
              <file id="21" file_name="a.txt" size="12" created="1230000000"
                    updated="1230000001" user_id="7" sha1="..."/>
            </files>
          </folder>
        </tree>

    Args:
        body: the (already unzipped) XML
        materialize_user: looks a user up by ID, bound into every owner
        materialize_tag: looks a tag up by ID, bound into every tag

    Returns:
        The root folder.  Malformed input gives an empty Folder().
    """
    root = _parse_xml(body, huge_tree)
    if root is None:
        return Folder()
    if root.tag == "folder":
        folder_elem = root
    else:
        folder_elem = root.find("folder")
    if folder_elem is None:
        log.warning(f"no folder element found in tree with root {root.tag}")
        return Folder()
    return _parse_folder_element(folder_elem, None, materialize_user, materialize_tag)


## Structured outputs.  The REST transport hands these over as dicts of
## child element name to text.


def parse_user(data: Optional[dict[str, Any]]) -> Optional[User]:
    if not data:
        return None
    return User(
        id=_to_int(data.get("user_id"), 0),
        email=data.get("email"),
        login=data.get("login"),
        access_id=_to_int(data.get("access_id"), 0),
        max_upload_size=_to_int(data.get("max_upload_size"), 0),
        space_amount=_to_int(data.get("space_amount"), 0),
        space_used=_to_int(data.get("space_used"), 0),
    )


def parse_folder_base(data: Optional[dict[str, Any]]) -> Optional[FolderBase]:
    if not data:
        return None
    return FolderBase(
        id=_to_int(data.get("folder_id"), 0),
        name=data.get("folder_name"),
        owner_id=_to_int(data.get("user_id")),
        folder_type_id=_to_int(data.get("folder_type_id")),
        parent_folder_id=_to_int(data.get("parent_folder_id")),
        password=data.get("password") or None,
        path=data.get("path") or None,
        public_name=data.get("public_name") or None,
        is_shared=_to_bool(data.get("shared")),
    )


def parse_file_info(
    data: Optional[dict[str, Any]],
    materialize_user: Optional[MaterializeUser] = None,
) -> Optional[File]:
    if not data:
        return None
    owner_id = _to_int(data.get("user_id"))
    return File(
        id=_to_int(data.get("file_id"), 0),
        name=data.get("file_name"),
        folder_id=_to_int(data.get("folder_id")),
        size=_to_int(data.get("size")),
        is_shared=_to_bool(data.get("shared")),
        public_name=data.get("shared_name") or None,
        description=data.get("description") or None,
        sha1_hash=data.get("sha1") or None,
        created=_to_datetime(data.get("created")),
        updated=_to_datetime(data.get("updated")),
        owner_id=owner_id,
        owner=_bind_owner(owner_id, materialize_user),
    )


def parse_comment(data: Optional[dict[str, Any]]) -> Optional[Comment]:
    if not data:
        return None
    return Comment(
        id=_to_int(data.get("comment_id"), 0),
        text=data.get("message"),
        user_id=_to_int(data.get("user_id")),
        user_name=data.get("user_name"),
        avatar_url=data.get("avatar_url") or None,
        created_on=_to_datetime(data.get("created")),
    )


def parse_server_time(value: Any) -> Optional[datetime]:
    return _to_datetime(value)
