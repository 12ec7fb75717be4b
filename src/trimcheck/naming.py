"""
Structural type-name matching.

A type is identified by its dotted qualified name rather than by object
identity: the same attribute type may be defined by several referenced
assemblies (the platform one and a polyfill shipped by a library), and all
of them must be recognized.
"""
from __future__ import annotations

from typing import Optional

from .symbols import Symbol


def is_named_type(type_symbol: Optional[Symbol], qualified_name: str) -> bool:
    """Return True if ``type_symbol`` is named exactly ``qualified_name``.

    Components are compared right to left against the symbol's containment
    chain (containing type while nested, then containing namespace). Both
    must run out together; only the root namespace, whose name is empty, may
    remain once the components are exhausted. A leading ``.`` anchors the
    name at the root namespace.
    """
    if type_symbol is None or not qualified_name:
        return False

    parts = qualified_name.split(".")
    if parts[0] == "":
        parts = parts[1:]
    if not parts:
        return False

    current: Optional[Symbol] = type_symbol
    for part in reversed(parts):
        if current is None or part != current.name:
            return False
        current = current.containing_type or current.containing_namespace

    return current is None or (current.name == "" and current.containing_namespace is None)
