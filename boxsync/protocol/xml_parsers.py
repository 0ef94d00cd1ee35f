"""
Pure functions for parsing the service's REST reply envelope.

All functions in this module are pure - they take XML bytes in and return
structured data out, with no side effects or I/O.
"""

import base64
import binascii
import logging
from typing import Any

from lxml import etree
from lxml.etree import _Element

from boxsync.lib import error

from .types import ServiceReply

log = logging.getLogger(__name__)

## outputs delivered as a flat structure of named values
STRUCT_OUTPUTS = frozenset({"user", "folder", "info", "comment"})

## outputs delivered as base64 encoded documents
BINARY_OUTPUTS = frozenset({"tree", "tag_xml", "updates"})


def parse_service_reply(
    body: bytes,
    method: str | None = None,
    huge_tree: bool = False,
) -> ServiceReply:
    """
    Parse a reply of the form

        <response>
          <status>create_ok</status>
          <folder><folder_id>42</folder_id>...</folder>
        </response>

    Args:
        body: Raw XML response bytes
        method: web method name, for error messages
        huge_tree: Allow parsing very large XML documents

    Returns:
        ServiceReply with the status text and the outputs

    Raises:
        ResponseError: If body is empty or not XML at all
    """
    if not body:
        raise error.ResponseError(method, "empty reply")
    parser = etree.XMLParser(huge_tree=huge_tree)
    try:
        tree = etree.fromstring(body, parser)
    except etree.XMLSyntaxError as e:
        raise error.ResponseError(method, f"reply is not XML: {e}") from e

    status = ""
    outputs: dict[str, Any] = {}
    for elem in tree:
        if not isinstance(elem.tag, str):
            ## comments and processing instructions
            continue
        if elem.tag == "status":
            status = (elem.text or "").strip()
            continue
        outputs[elem.tag] = _parse_output(elem)

    if not status:
        error.weirdness("reply without status", method, body)
    return ServiceReply(status=status, outputs=outputs, raw=body)


def _parse_output(elem: _Element) -> Any:
    if len(elem):
        if elem.tag in STRUCT_OUTPUTS:
            return {child.tag: child.text for child in elem if isinstance(child.tag, str)}
        return etree.tostring(elem)
    text = elem.text or ""
    if elem.tag in BINARY_OUTPUTS:
        return _decode_base64(text.strip())
    return text.strip()


def _decode_base64(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=False)
    except (binascii.Error, ValueError):
        log.warning("binary output is not base64, passing it on as is")
        return text.encode("utf-8")
