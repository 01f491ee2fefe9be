"""Dataclass to XML serialization for registry request bodies.

Field names become lowerCamelCase element names unless the field declares an
explicit ``metadata={"xml": name}``. None values are omitted, lists repeat
their element, enums contribute their value, dates are ISO formatted and
booleans are written as ``true``/``false``.
"""

import dataclasses
from datetime import date, datetime
from enum import Enum
from typing import Any

from lxml import etree


def camel_case(name: str) -> str:
    """Convert a snake_case field name to lowerCamelCase.

    Example:
        >>> camel_case("medicare_card_number")
        'medicareCardNumber'
    """
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def element_name(field: dataclasses.Field) -> str:
    """Wire name of a dataclass field."""
    return field.metadata.get("xml", camel_case(field.name))


def format_value(value: Any) -> str:
    """Format a scalar for element text."""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _append(parent: etree._Element, tag: str, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            _append(parent, tag, item)
        return

    child = etree.SubElement(parent, tag)
    if dataclasses.is_dataclass(value):
        _populate(child, value, _namespace_of(tag))
    else:
        child.text = format_value(value)


def _namespace_of(tag: str) -> str:
    return etree.QName(tag).namespace or ""


def _populate(element: etree._Element, obj: Any, namespace: str) -> None:
    for field in dataclasses.fields(obj):
        name = element_name(field)
        tag = f"{{{namespace}}}{name}" if namespace else name
        _append(element, tag, getattr(obj, field.name))


def to_element(obj: Any, tag: str, namespace: str = "") -> etree._Element:
    """Serialize a request dataclass into a new element.

    Args:
        obj: Dataclass instance
        tag: Local name of the root element
        namespace: Namespace of the root element and its descendants

    Returns:
        lxml element holding the serialized request

    Raises:
        TypeError: If ``obj`` is not a dataclass instance
    """
    if not dataclasses.is_dataclass(obj) or isinstance(obj, type):
        raise TypeError(f"Expected a dataclass instance, got {type(obj).__name__}")

    root = etree.Element(f"{{{namespace}}}{tag}" if namespace else tag)
    _populate(root, obj, namespace)
    return root
