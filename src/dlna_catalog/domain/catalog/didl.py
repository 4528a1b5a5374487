"""
DIDL-Lite decoding for ContentDirectory Browse responses.

Turns the SOAP envelope returned by the media server into typed
Container/Item records. Missing optional fields are resolved to their
defaults here so nothing downstream handles raw XML.
"""

import xml.etree.ElementTree as ET
from typing import Optional

from .errors import BrowseError
from .models import Container, DirectoryListing, Item, to_int


def _local_name(tag: str) -> str:
    """Strip the '{namespace}' prefix from an ElementTree tag."""
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _child_text(elem: ET.Element, name: str) -> Optional[str]:
    """Text of the first direct child with the given local name."""
    for child in elem:
        if _local_name(child.tag) == name:
            text = (child.text or "").strip()
            return text or None
    return None


def _first_res(elem: ET.Element) -> Optional[ET.Element]:
    for child in elem:
        if _local_name(child.tag) == "res":
            return child
    return None


def parse_container(elem: ET.Element) -> Container:
    return Container(
        id=elem.get("id", ""),
        parent_id=elem.get("parentID"),
        title=_child_text(elem, "title") or "Unknown",
        upnp_class=_child_text(elem, "class"),
        child_count=to_int(elem.get("childCount")),
    )


def parse_item(elem: ET.Element) -> Item:
    res = _first_res(elem)
    url = None
    duration = bitrate = channels = None
    if res is not None:
        url = (res.text or "").strip() or None
        duration = res.get("duration")
        bitrate = to_int(res.get("bitrate"))
        channels = to_int(res.get("nrAudioChannels"))

    return Item(
        id=elem.get("id", ""),
        title=_child_text(elem, "title") or "Unknown",
        artist=_child_text(elem, "artist") or _child_text(elem, "creator") or "Unknown",
        album=_child_text(elem, "album") or "Unknown",
        duration=duration,
        url=url,
        genre=_child_text(elem, "genre"),
        bitrate=bitrate,
        nr_audio_channels=channels,
    )


def parse_didl(didl_text: str) -> DirectoryListing:
    """Decode a DIDL-Lite document into containers and items.

    Raises:
        BrowseError: If the document is not well-formed XML
    """
    try:
        root = ET.fromstring(didl_text)
    except ET.ParseError as e:
        raise BrowseError(f"Invalid DIDL-Lite payload: {e}") from e

    containers: list[Container] = []
    items: list[Item] = []
    seen: set[str] = set()

    for elem in root:
        kind = _local_name(elem.tag)
        if kind == "container":
            containers.append(parse_container(elem))
        elif kind == "item":
            item = parse_item(elem)
            # Item ids are unique within a snapshot; first occurrence wins
            if not item.id or item.id in seen:
                continue
            seen.add(item.id)
            items.append(item)

    return DirectoryListing(containers=containers, items=items)


def parse_browse_response(xml_text: str) -> DirectoryListing:
    """Extract and decode the DIDL-Lite Result from a SOAP Browse response.

    Raises:
        BrowseError: If the envelope or the embedded document is malformed,
            or the envelope carries no Result element
    """
    try:
        envelope = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise BrowseError(f"Invalid SOAP response: {e}") from e

    for elem in envelope.iter():
        if _local_name(elem.tag) == "Result":
            result = (elem.text or "").strip()
            if not result:
                return DirectoryListing(containers=[], items=[])
            return parse_didl(result)

    fault = next(
        (e for e in envelope.iter() if _local_name(e.tag) == "Fault"), None
    )
    if fault is not None:
        detail = _child_text(fault, "faultstring") or "SOAP fault"
        raise BrowseError(f"Browse failed: {detail}")
    raise BrowseError("Browse response has no Result element")
