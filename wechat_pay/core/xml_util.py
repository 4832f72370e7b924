from collections.abc import Mapping
from enum import Enum
from typing import Any

from lxml import etree

XML_RESERVED_CHARS = ("&", "<", ">")
CDATA_END = "]]>"


def to_xml(obj: Mapping[str, Any], root_name: str = "xml") -> str:
    """
    Serialize a mapping into an XML document wrapped in a root element.

    Text holding XML reserved characters is written as CDATA, everything
    else as plain text. None values are skipped, lists become repeated
    elements and nested mappings become nested elements.

    Args:
        obj: Flat or shallow mapping to serialize
        root_name: Tag of the wrapping root element

    Returns:
        str: The XML document
    """
    root = etree.Element(root_name)
    _append_children(root, obj)

    return etree.tostring(root, encoding="unicode")


def from_xml(text: str | bytes) -> dict[str, Any]:
    """
    Parse an XML document into a dict, dropping the root element.

    Leaf elements become strings ("" when empty). An element that occurs
    once stays a scalar, repeated elements become a list. Attributes are
    ignored.

    Args:
        text: The XML document

    Returns:
        dict: Children of the root element

    Raises:
        lxml.etree.XMLSyntaxError: If the document is malformed
    """
    if isinstance(text, str):
        text = text.encode("utf-8")

    parser = etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
    )
    root = etree.fromstring(text, parser=parser)

    return _children_to_dict(root)


def _append_children(parent: etree._Element, obj: Mapping[str, Any]) -> None:
    for key, value in obj.items():
        if value is None:
            continue

        items = value if isinstance(value, list | tuple) else [value]
        for item in items:
            if item is None:
                continue

            child = etree.SubElement(parent, key)
            if isinstance(item, Mapping):
                _append_children(child, item)
            else:
                _set_text(child, _to_text(item))


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, Enum):
        return str(value.value)

    return str(value)


def _set_text(element: etree._Element, text: str) -> None:
    # CDATA cannot hold its own terminator, lxml escapes such text instead
    if any(char in text for char in XML_RESERVED_CHARS) and CDATA_END not in text:
        element.text = etree.CDATA(text)
    else:
        element.text = text


def _element_children(element: etree._Element) -> list[etree._Element]:
    # Skips unresolved entity references
    return [child for child in element if isinstance(child.tag, str)]


def _element_to_value(element: etree._Element) -> str | dict[str, Any]:
    if not _element_children(element):
        return element.text or ""

    return _children_to_dict(element)


def _children_to_dict(element: etree._Element) -> dict[str, Any]:
    result: dict[str, Any] = {}

    for child in _element_children(element):
        value = _element_to_value(child)

        if child.tag not in result:
            result[child.tag] = value
        elif isinstance(result[child.tag], list):
            result[child.tag].append(value)
        else:
            result[child.tag] = [result[child.tag], value]

    return result
