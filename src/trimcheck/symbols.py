"""
Semantic model symbols consumed by the trimming check.

The check only reads these objects; they are built once by the model
loader (or by tests) and never mutated during a pass.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple


class SymbolKind(Enum):
    NAMESPACE = "namespace"
    NAMED_TYPE = "named_type"
    METHOD = "method"
    PROPERTY = "property"
    FIELD = "field"


class MethodKind(Enum):
    ORDINARY = "ordinary"
    CONSTRUCTOR = "constructor"
    PROPERTY_GET = "property_get"
    PROPERTY_SET = "property_set"
    ANONYMOUS_FUNCTION = "anonymous_function"
    LOCAL_FUNCTION = "local_function"


STRING_TYPE_NAMES = {"string", "System.String"}


@dataclass(frozen=True)
class Location:
    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}({self.line},{self.column})"
        return f"{self.file}({self.line})"


@dataclass(frozen=True)
class TypedConstant:
    """A constant attribute argument together with the name of its type."""
    value: Any
    type_name: Optional[str] = "string"

    @property
    def is_string(self) -> bool:
        return self.type_name in STRING_TYPE_NAMES


@dataclass(eq=False)
class AttributeData:
    attribute_class: Optional["NamedTypeSymbol"]
    constructor_arguments: List[TypedConstant] = field(default_factory=list)
    named_arguments: List[Tuple[str, TypedConstant]] = field(default_factory=list)


@dataclass(eq=False)
class Symbol:
    name: str
    containing_type: Optional["NamedTypeSymbol"] = None
    containing_namespace: Optional["NamespaceSymbol"] = None
    attributes: List[AttributeData] = field(default_factory=list)

    kind: ClassVar[Optional[SymbolKind]] = None

    def to_display_string(self) -> str:
        if self.containing_type is not None:
            return f"{self.containing_type.to_display_string()}.{self.name}"
        return self.name

    def __str__(self) -> str:
        return self.to_display_string()


@dataclass(eq=False)
class NamespaceSymbol(Symbol):
    kind = SymbolKind.NAMESPACE

    @property
    def is_global_namespace(self) -> bool:
        return self.containing_namespace is None and self.name == ""

    def to_display_string(self) -> str:
        parent = self.containing_namespace
        if parent is None or parent.is_global_namespace:
            return self.name
        return f"{parent.to_display_string()}.{self.name}"


@dataclass(eq=False)
class NamedTypeSymbol(Symbol):
    assembly: str = ""

    kind = SymbolKind.NAMED_TYPE

    def to_display_string(self) -> str:
        if self.containing_type is not None:
            return f"{self.containing_type.to_display_string()}.{self.name}"
        ns = self.containing_namespace
        if ns is None or ns.is_global_namespace:
            return self.name
        return f"{ns.to_display_string()}.{self.name}"


@dataclass(eq=False)
class MethodSymbol(Symbol):
    method_kind: MethodKind = MethodKind.ORDINARY
    parameters: List[str] = field(default_factory=list)
    # Set only for `override` declarations; points at the member being overridden.
    overridden_method: Optional["MethodSymbol"] = None
    associated_property: Optional["PropertySymbol"] = None
    # Generic instantiations point back at their declaration.
    constructed_from: Optional["MethodSymbol"] = None

    kind = SymbolKind.METHOD

    @property
    def original_definition(self) -> "MethodSymbol":
        return self.constructed_from if self.constructed_from is not None else self

    def to_display_string(self) -> str:
        owner = self.containing_type.to_display_string() if self.containing_type is not None else ""
        prefix = f"{owner}." if owner else ""
        if self.method_kind == MethodKind.PROPERTY_GET and self.associated_property is not None:
            return f"{self.associated_property.to_display_string()}.get"
        if self.method_kind == MethodKind.PROPERTY_SET and self.associated_property is not None:
            return f"{self.associated_property.to_display_string()}.set"
        name = self.name
        if self.method_kind == MethodKind.CONSTRUCTOR and self.containing_type is not None:
            name = self.containing_type.name
        return f"{prefix}{name}({', '.join(self.parameters)})"


@dataclass(eq=False)
class PropertySymbol(Symbol):
    get_method: Optional[MethodSymbol] = None
    set_method: Optional[MethodSymbol] = None

    kind = SymbolKind.PROPERTY


@dataclass(eq=False)
class FieldSymbol(Symbol):
    kind = SymbolKind.FIELD


def is_method_like(symbol: Optional[Symbol]) -> bool:
    return isinstance(symbol, MethodSymbol)


@dataclass(eq=False)
class MemberBody:
    """Operations lexically owned by one member (or one field initializer)."""
    owner: Symbol
    operations: List[Any] = field(default_factory=list)


@dataclass(eq=False)
class Compilation:
    name: str = ""
    properties: Dict[str, Any] = field(default_factory=dict)
    types: List[NamedTypeSymbol] = field(default_factory=list)
    bodies: List[MemberBody] = field(default_factory=list)
