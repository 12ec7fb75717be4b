"""
Operation tree nodes and value-usage classification.

Only the node kinds the trimming check cares about get their own class;
everything else is a generic ``Block`` that just holds children so the walk
can reach nested calls.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, Flag
from typing import Iterator, List, Optional, Tuple

from .symbols import Location, MethodSymbol, PropertySymbol, Symbol


class OperationKind(Enum):
    INVOCATION = "invocation"
    OBJECT_CREATION = "object_creation"
    PROPERTY_REFERENCE = "property_reference"
    SIMPLE_ASSIGNMENT = "simple_assignment"
    COMPOUND_ASSIGNMENT = "compound_assignment"
    INCREMENT = "increment"
    DECREMENT = "decrement"
    ARGUMENT = "argument"
    NAME_OF = "nameof"
    ANONYMOUS_FUNCTION = "lambda"
    LOCAL_FUNCTION = "local_function"
    BLOCK = "block"


class RefKind(Enum):
    NONE = "none"
    REF = "ref"
    OUT = "out"
    IN = "in"


class ValueUsage(Flag):
    NONE = 0
    READ = 1
    WRITE = 2
    REFERENCE = 4
    NAME = 8

    READ_WRITE = READ | WRITE
    READABLE_REFERENCE = READ | REFERENCE
    WRITABLE_REFERENCE = WRITE | REFERENCE
    READABLE_WRITABLE_REFERENCE = READ | WRITE | REFERENCE


@dataclass(eq=False)
class Operation:
    kind: OperationKind = OperationKind.BLOCK
    location: Location = field(default_factory=Location)
    parent: Optional["Operation"] = field(default=None, repr=False)

    @property
    def children(self) -> List["Operation"]:
        return []

    def adopt(self) -> "Operation":
        """Point every child's ``parent`` at this node, recursively."""
        for child in self.children:
            child.parent = self
            child.adopt()
        return self


@dataclass(eq=False)
class Block(Operation):
    body: List[Operation] = field(default_factory=list)

    @property
    def children(self) -> List[Operation]:
        return list(self.body)


@dataclass(eq=False)
class Invocation(Operation):
    # ``None`` when the callee could not be bound.
    target_method: Optional[MethodSymbol] = None
    is_virtual: bool = False
    instance: Optional[Operation] = None
    arguments: List[Operation] = field(default_factory=list)
    kind: OperationKind = OperationKind.INVOCATION

    @property
    def children(self) -> List[Operation]:
        head = [self.instance] if self.instance is not None else []
        return head + list(self.arguments)


@dataclass(eq=False)
class ObjectCreation(Operation):
    constructor: Optional[MethodSymbol] = None
    arguments: List[Operation] = field(default_factory=list)
    kind: OperationKind = OperationKind.OBJECT_CREATION

    @property
    def children(self) -> List[Operation]:
        return list(self.arguments)


@dataclass(eq=False)
class PropertyReference(Operation):
    target_property: Optional[PropertySymbol] = None
    instance: Optional[Operation] = None
    kind: OperationKind = OperationKind.PROPERTY_REFERENCE

    @property
    def children(self) -> List[Operation]:
        return [self.instance] if self.instance is not None else []


@dataclass(eq=False)
class SimpleAssignment(Operation):
    target: Optional[Operation] = None
    value: Optional[Operation] = None
    kind: OperationKind = OperationKind.SIMPLE_ASSIGNMENT

    @property
    def children(self) -> List[Operation]:
        return [op for op in (self.target, self.value) if op is not None]


@dataclass(eq=False)
class CompoundAssignment(SimpleAssignment):
    kind: OperationKind = OperationKind.COMPOUND_ASSIGNMENT


@dataclass(eq=False)
class Increment(Operation):
    target: Optional[Operation] = None
    kind: OperationKind = OperationKind.INCREMENT

    @property
    def children(self) -> List[Operation]:
        return [self.target] if self.target is not None else []


@dataclass(eq=False)
class Argument(Operation):
    value: Optional[Operation] = None
    ref_kind: RefKind = RefKind.NONE
    kind: OperationKind = OperationKind.ARGUMENT

    @property
    def children(self) -> List[Operation]:
        return [self.value] if self.value is not None else []


@dataclass(eq=False)
class NameOf(Operation):
    argument: Optional[Operation] = None
    kind: OperationKind = OperationKind.NAME_OF

    @property
    def children(self) -> List[Operation]:
        return [self.argument] if self.argument is not None else []


@dataclass(eq=False)
class AnonymousFunction(Block):
    """A lambda or local function; its body still belongs to the declaring member."""
    symbol: Optional[MethodSymbol] = None
    kind: OperationKind = OperationKind.ANONYMOUS_FUNCTION


def value_usage_of(operation: Operation) -> ValueUsage:
    """Classify how the value produced by ``operation`` is used by its parent."""
    parent = operation.parent
    if isinstance(parent, CompoundAssignment):
        return ValueUsage.READ_WRITE if parent.target is operation else ValueUsage.READ
    if isinstance(parent, SimpleAssignment):
        return ValueUsage.WRITE if parent.target is operation else ValueUsage.READ
    if isinstance(parent, Increment):
        return ValueUsage.READ_WRITE
    if isinstance(parent, Argument):
        if parent.ref_kind == RefKind.REF:
            return ValueUsage.READABLE_WRITABLE_REFERENCE
        if parent.ref_kind == RefKind.OUT:
            return ValueUsage.WRITABLE_REFERENCE
        if parent.ref_kind == RefKind.IN:
            return ValueUsage.READABLE_REFERENCE
        return ValueUsage.READ
    if isinstance(parent, NameOf):
        return ValueUsage.NAME
    return ValueUsage.READ


def walk(
    operations: List[Operation], enclosing: Optional[Symbol]
) -> Iterator[Tuple[Operation, Optional[Symbol]]]:
    """Yield ``(operation, enclosing_symbol)`` depth-first in source order.

    Operations nested in a lambda or local function stay attributed to the
    member whose body declares them.
    """
    stack: List[Tuple[Operation, Optional[Symbol]]] = [
        (op, enclosing) for op in reversed(operations)
    ]
    while stack:
        op, owner = stack.pop()
        yield op, owner
        for child in reversed(op.children):
            stack.append((child, owner))
