"""
Discovery of the ``RequiresUnreferencedCodeAttribute`` trimming marker.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .naming import is_named_type
from .symbols import AttributeData, Symbol

REQUIRES_UNREFERENCED_CODE_ATTRIBUTE = "System.Diagnostics.CodeAnalysis.RequiresUnreferencedCodeAttribute"


@dataclass(frozen=True)
class MarkerInfo:
    message: Optional[str]
    url: Optional[str] = None


def find_marker(attributes: Iterable[AttributeData]) -> Optional[AttributeData]:
    """Return the first well-formed marker attribute, or None.

    Well-formed means the attribute class matches by qualified name and the
    attribute was constructed with exactly one string argument. Anything
    else is not a marker and is skipped.
    """
    for attr in attributes:
        if attr.attribute_class is None:
            continue
        if not is_named_type(attr.attribute_class, REQUIRES_UNREFERENCED_CODE_ATTRIBUTE):
            continue
        args = attr.constructor_arguments
        if len(args) == 1 and args[0].is_string:
            return attr
    return None


def read_marker(attr: AttributeData) -> MarkerInfo:
    message = attr.constructor_arguments[0].value
    url = None
    for name, value in attr.named_arguments:
        if name == "Url":
            url = None if value.value is None else str(value.value)
            break
    return MarkerInfo(message=message, url=url)


def marker_of(symbol: Optional[Symbol]) -> Optional[MarkerInfo]:
    if symbol is None:
        return None
    attr = find_marker(symbol.attributes)
    return read_marker(attr) if attr is not None else None
