"""
Semantic model loader.

Reads a YAML (or JSON) dump of a compiled program - types, members,
attributes and the operation trees of member bodies - and builds the
symbol/operation objects the trimming check walks.

Layout of a dump::

    compilation:
      name: App
      properties: {PublishTrimmed: "true"}
    types:
      - name: Marked
        namespace: Demo
        members:
          - kind: method
            name: M
            attributes:
              - type: System.Diagnostics.CodeAnalysis.RequiresUnreferencedCodeAttribute
                arguments: ["m1"]
          - kind: method
            name: Caller
            body:
              - {kind: invocation, target: Demo.Marked.M, location: "Program.cs:10:9"}

Member references that cannot be resolved become unresolved targets (the
check skips them); structural problems raise ``ModelLoadError``.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .operations import (
    AnonymousFunction,
    Argument,
    Block,
    CompoundAssignment,
    Increment,
    Invocation,
    NameOf,
    ObjectCreation,
    Operation,
    OperationKind,
    PropertyReference,
    RefKind,
    SimpleAssignment,
)
from .symbols import (
    AttributeData,
    Compilation,
    FieldSymbol,
    Location,
    MemberBody,
    MethodKind,
    MethodSymbol,
    NamedTypeSymbol,
    NamespaceSymbol,
    PropertySymbol,
    Symbol,
    TypedConstant,
)

_MEMBER_KINDS = {"method", "constructor", "property"}
_REF_KINDS = {k.value: k for k in RefKind}


class ModelLoadError(ValueError):
    """Raised when a semantic model dump is malformed."""


def load_model(path: Path) -> Compilation:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise ModelLoadError(f"{path}: cannot parse model dump: {e}") from e
    if not isinstance(data, dict):
        raise ModelLoadError(f"{path}: expected a mapping at top level")
    try:
        return parse_model(data)
    except ModelLoadError as e:
        raise ModelLoadError(f"{path}: {e}") from e


def parse_model(data: Dict[str, Any]) -> Compilation:
    return _ModelBuilder().build(data)


def _member_list(entry: Dict[str, Any]) -> List[Any]:
    members = entry.get("members") or []
    return members if isinstance(members, list) else []


def _constant(raw: Any) -> TypedConstant:
    if isinstance(raw, dict) and "value" in raw:
        return TypedConstant(raw["value"], raw.get("type"))
    if isinstance(raw, str):
        return TypedConstant(raw, "string")
    if isinstance(raw, bool):
        return TypedConstant(raw, "bool")
    if isinstance(raw, int):
        return TypedConstant(raw, "int")
    if isinstance(raw, float):
        return TypedConstant(raw, "double")
    return TypedConstant(raw, None)


class _ModelBuilder:
    def __init__(self) -> None:
        self.errors: List[str] = []
        self.root = NamespaceSymbol(name="")
        self.namespaces: Dict[str, NamespaceSymbol] = {"": self.root}
        self.types: Dict[str, NamedTypeSymbol] = {}
        self.type_ids: Dict[int, str] = {}
        self.external_types: Dict[str, NamedTypeSymbol] = {}
        self.methods: Dict[str, MethodSymbol] = {}
        self.properties: Dict[str, PropertySymbol] = {}
        self.bodies: List[MemberBody] = []

    def build(self, data: Dict[str, Any]) -> Compilation:
        comp = data.get("compilation") or {}
        if not isinstance(comp, dict):
            self.errors.append(f"compilation: expected dict, got {type(comp).__name__}")
            comp = {}
        properties = comp.get("properties") or {}
        if not isinstance(properties, dict):
            self.errors.append("compilation.properties: expected dict")
            properties = {}

        raw_types = data.get("types") or []
        if not isinstance(raw_types, list):
            raise ModelLoadError("'types' must be a list")

        declared = self._declare_types(raw_types)
        self._link_containing_types(declared)
        for entry, type_sym, path in declared:
            self._declare_members(entry, type_sym, path)
        for entry, type_sym, path in declared:
            self._link_members(entry, type_sym, path)
            self._build_bodies(entry, type_sym, path)

        if self.errors:
            joined = "\n  ".join(self.errors)
            raise ModelLoadError(f"model validation failed:\n  {joined}")

        return Compilation(
            name=str(comp.get("name", "")),
            properties=dict(properties),
            types=[t for _, t, _ in declared],
            bodies=self.bodies,
        )

    # ---- types ----
    def _namespace(self, dotted: str) -> NamespaceSymbol:
        if dotted in self.namespaces:
            return self.namespaces[dotted]
        parent_name, _, name = dotted.rpartition(".")
        ns = NamespaceSymbol(name=name, containing_namespace=self._namespace(parent_name))
        self.namespaces[dotted] = ns
        return ns

    def _declare_types(self, raw_types: List[Any]) -> List[tuple]:
        declared = []
        for i, entry in enumerate(raw_types):
            path = f"types[{i}]"
            if not isinstance(entry, dict):
                self.errors.append(f"{path}: expected dict, got {type(entry).__name__}")
                continue
            name = entry.get("name")
            if not isinstance(name, str) or not name:
                self.errors.append(f"{path}: missing required key 'name'")
                continue
            namespace = str(entry.get("namespace") or "")
            outer = entry.get("containing_type")
            if outer:
                default_id = f"{outer}.{name}"
            else:
                default_id = f"{namespace}.{name}" if namespace else name
            type_id = str(entry.get("id") or default_id)
            if type_id in self.types:
                self.errors.append(f"{path}: duplicate type id '{type_id}'")
                continue
            type_sym = NamedTypeSymbol(
                name=name,
                containing_namespace=None if outer else self._namespace(namespace),
                assembly=str(entry.get("assembly") or ""),
            )
            self.types[type_id] = type_sym
            self.type_ids[id(type_sym)] = type_id
            declared.append((entry, type_sym, path))
        return declared

    def _link_containing_types(self, declared: List[tuple]) -> None:
        for entry, type_sym, path in declared:
            outer = entry.get("containing_type")
            if not outer:
                continue
            outer_sym = self.types.get(str(outer))
            if outer_sym is None:
                self.errors.append(f"{path}: unknown containing_type '{outer}'")
                continue
            type_sym.containing_type = outer_sym

    def _type_ref(self, ref: Any) -> Optional[NamedTypeSymbol]:
        """Resolve an attribute type; undeclared names become referenced types."""
        if ref is None:
            return None
        ref = str(ref)
        if ref in self.types:
            return self.types[ref]
        if ref not in self.external_types:
            namespace, _, name = ref.rpartition(".")
            self.external_types[ref] = NamedTypeSymbol(
                name=name, containing_namespace=self._namespace(namespace)
            )
        return self.external_types[ref]

    def _attributes(self, raw: Any, path: str) -> List[AttributeData]:
        if raw is None:
            return []
        if not isinstance(raw, list):
            self.errors.append(f"{path}.attributes: expected list, got {type(raw).__name__}")
            return []
        attrs: List[AttributeData] = []
        for i, item in enumerate(raw):
            if not isinstance(item, dict) or "type" not in item:
                self.errors.append(f"{path}.attributes[{i}]: expected dict with key 'type'")
                continue
            args = item.get("arguments") or []
            named = item.get("named") or {}
            if not isinstance(args, list) or not isinstance(named, dict):
                self.errors.append(f"{path}.attributes[{i}]: 'arguments' must be a list and 'named' a dict")
                continue
            attrs.append(AttributeData(
                attribute_class=self._type_ref(item["type"]),
                constructor_arguments=[_constant(a) for a in args],
                named_arguments=[(str(k), _constant(v)) for k, v in named.items()],
            ))
        return attrs

    # ---- members ----
    def _declare_members(self, entry: Dict[str, Any], type_sym: NamedTypeSymbol, path: str) -> None:
        type_sym.attributes = self._attributes(entry.get("attributes"), path)
        type_id = self._id_of(type_sym)
        members = entry.get("members") or []
        if not isinstance(members, list):
            self.errors.append(f"{path}.members: expected list")
            return
        for j, member in enumerate(members):
            mpath = f"{path}.members[{j}]"
            if not isinstance(member, dict):
                self.errors.append(f"{mpath}: expected dict, got {type(member).__name__}")
                continue
            kind = member.get("kind", "method")
            if kind not in _MEMBER_KINDS:
                self.errors.append(f"{mpath}: unknown member kind '{kind}' (valid: {sorted(_MEMBER_KINDS)})")
                continue
            if kind == "constructor":
                name = ".ctor"
            else:
                name = member.get("name")
                if not isinstance(name, str) or not name:
                    self.errors.append(f"{mpath}: missing required key 'name'")
                    continue
            member_id = str(member.get("id") or f"{type_id}.{name}")
            attrs = self._attributes(member.get("attributes"), mpath)
            if kind == "property":
                self._declare_property(member, member_id, name, type_sym, attrs, mpath)
                continue
            parameters = member.get("parameters") or []
            if not isinstance(parameters, list):
                self.errors.append(f"{mpath}.parameters: expected list, got {type(parameters).__name__}")
                parameters = []
            method = MethodSymbol(
                name=name,
                containing_type=type_sym,
                attributes=attrs,
                method_kind=MethodKind.CONSTRUCTOR if kind == "constructor" else MethodKind.ORDINARY,
                parameters=[str(p) for p in parameters],
            )
            self._register_method(member_id, method, mpath)

    def _declare_property(self, member, member_id, name, type_sym, attrs, mpath) -> None:
        if member_id in self.properties:
            self.errors.append(f"{mpath}: duplicate property id '{member_id}'")
            return
        prop = PropertySymbol(name=name, containing_type=type_sym, attributes=attrs)
        self.properties[member_id] = prop
        for key, method_kind, suffix in (
            ("getter", MethodKind.PROPERTY_GET, "get"),
            ("setter", MethodKind.PROPERTY_SET, "set"),
        ):
            raw = member.get(key)
            if raw is None or raw is False:
                continue
            accessor_data = raw if isinstance(raw, dict) else {}
            accessor = MethodSymbol(
                name=f"{suffix}_{name}",
                containing_type=type_sym,
                attributes=self._attributes(accessor_data.get("attributes"), f"{mpath}.{key}"),
                method_kind=method_kind,
                associated_property=prop,
            )
            if method_kind == MethodKind.PROPERTY_GET:
                prop.get_method = accessor
            else:
                prop.set_method = accessor
            self._register_method(str(accessor_data.get("id") or f"{member_id}.{suffix}"), accessor, mpath)

    def _register_method(self, method_id: str, method: MethodSymbol, path: str) -> None:
        if method_id in self.methods:
            self.errors.append(f"{path}: duplicate member id '{method_id}' (give overloads an explicit 'id')")
            return
        self.methods[method_id] = method

    def _id_of(self, type_sym: NamedTypeSymbol) -> str:
        return self.type_ids.get(id(type_sym), type_sym.to_display_string())

    def _link_members(self, entry: Dict[str, Any], type_sym: NamedTypeSymbol, path: str) -> None:
        for j, member in enumerate(_member_list(entry)):
            if not isinstance(member, dict):
                continue
            method = self._method_for(member, type_sym)
            if method is None:
                continue
            for key, attr in (("overrides", "overridden_method"), ("original_definition", "constructed_from")):
                ref = member.get(key)
                if not ref:
                    continue
                target = self.methods.get(str(ref))
                if target is None:
                    self.errors.append(f"{path}.members[{j}]: unknown {key} '{ref}'")
                    continue
                setattr(method, attr, target)

    def _method_for(self, member: Dict[str, Any], type_sym: NamedTypeSymbol) -> Optional[MethodSymbol]:
        kind = member.get("kind", "method")
        if kind not in ("method", "constructor"):
            return None
        name = ".ctor" if kind == "constructor" else member.get("name")
        member_id = str(member.get("id") or f"{self._id_of(type_sym)}.{name}")
        method = self.methods.get(member_id)
        if method is not None and method.containing_type is type_sym:
            return method
        return None

    # ---- bodies ----
    def _build_bodies(self, entry: Dict[str, Any], type_sym: NamedTypeSymbol, path: str) -> None:
        for j, member in enumerate(_member_list(entry)):
            if not isinstance(member, dict):
                continue
            mpath = f"{path}.members[{j}]"
            if member.get("kind") == "property":
                prop = self.properties.get(
                    str(member.get("id") or f"{self._id_of(type_sym)}.{member.get('name')}")
                )
                if prop is None:
                    continue
                for key, accessor in (("getter", prop.get_method), ("setter", prop.set_method)):
                    accessor_data = member.get(key)
                    if accessor is not None and isinstance(accessor_data, dict) and "body" in accessor_data:
                        self._add_body(accessor, accessor_data["body"], f"{mpath}.{key}.body")
                continue
            method = self._method_for(member, type_sym)
            if method is not None and "body" in member:
                self._add_body(method, member["body"], f"{mpath}.body")

        initializers = entry.get("initializers") or []
        if not isinstance(initializers, list):
            self.errors.append(f"{path}.initializers: expected list")
            return
        for j, init in enumerate(initializers):
            ipath = f"{path}.initializers[{j}]"
            if not isinstance(init, dict) or "field" not in init:
                self.errors.append(f"{ipath}: expected dict with key 'field'")
                continue
            owner = FieldSymbol(name=str(init["field"]), containing_type=type_sym)
            self._add_body(owner, init.get("body") or [], f"{ipath}.body")

    def _add_body(self, owner: Symbol, raw: Any, path: str) -> None:
        ops = self._operations(raw, path, owner)
        for op in ops:
            op.adopt()
        self.bodies.append(MemberBody(owner=owner, operations=ops))

    def _operations(self, raw: Any, path: str, owner: Symbol) -> List[Operation]:
        if raw is None:
            return []
        if not isinstance(raw, list):
            self.errors.append(f"{path}: expected list, got {type(raw).__name__}")
            return []
        ops: List[Operation] = []
        for i, node in enumerate(raw):
            op = self._operation(node, f"{path}[{i}]", owner)
            if op is not None:
                ops.append(op)
        return ops

    def _location(self, raw: Any, path: str) -> Location:
        if raw is None:
            return Location()
        if isinstance(raw, dict):
            try:
                return Location(str(raw.get("file", "")), int(raw.get("line", 0)), int(raw.get("column", 0)))
            except (TypeError, ValueError):
                self.errors.append(f"{path}.location: line/column must be integers")
                return Location()
        if isinstance(raw, str):
            parts = raw.rsplit(":", 2)
            try:
                if len(parts) == 3:
                    return Location(parts[0], int(parts[1]), int(parts[2]))
                if len(parts) == 2:
                    return Location(parts[0], int(parts[1]))
            except ValueError:
                pass
            return Location(raw)
        self.errors.append(f"{path}.location: expected dict or 'file:line:col' string")
        return Location()

    def _operation(self, node: Any, path: str, owner: Symbol) -> Optional[Operation]:
        if not isinstance(node, dict):
            self.errors.append(f"{path}: expected dict, got {type(node).__name__}")
            return None
        kind = node.get("kind", "block")
        loc = self._location(node.get("location"), path)

        def one(key: str) -> Optional[Operation]:
            raw = node.get(key)
            return self._operation(raw, f"{path}.{key}", owner) if raw is not None else None

        def many(key: str) -> List[Operation]:
            return self._operations(node.get(key), f"{path}.{key}", owner)

        if kind == "invocation":
            target = node.get("target")
            return Invocation(
                location=loc,
                target_method=self.methods.get(str(target)) if target is not None else None,
                is_virtual=bool(node.get("virtual", False)),
                instance=one("instance"),
                arguments=[self._as_argument(a) for a in many("arguments")],
            )
        if kind == "object_creation":
            ctor = node.get("constructor")
            return ObjectCreation(
                location=loc,
                constructor=self.methods.get(str(ctor)) if ctor is not None else None,
                arguments=[self._as_argument(a) for a in many("arguments")],
            )
        if kind == "property_reference":
            prop = node.get("property")
            return PropertyReference(
                location=loc,
                target_property=self.properties.get(str(prop)) if prop is not None else None,
                instance=one("instance"),
            )
        if kind == "simple_assignment":
            return SimpleAssignment(location=loc, target=one("target"), value=one("value"))
        if kind == "compound_assignment":
            return CompoundAssignment(location=loc, target=one("target"), value=one("value"))
        if kind in ("increment", "decrement"):
            op_kind = OperationKind.INCREMENT if kind == "increment" else OperationKind.DECREMENT
            return Increment(location=loc, target=one("target"), kind=op_kind)
        if kind == "argument":
            ref_kind = str(node.get("ref_kind", "none"))
            if ref_kind not in _REF_KINDS:
                self.errors.append(f"{path}: unknown ref_kind '{ref_kind}' (valid: {sorted(_REF_KINDS)})")
                ref_kind = "none"
            return Argument(location=loc, value=one("value"), ref_kind=_REF_KINDS[ref_kind])
        if kind == "nameof":
            return NameOf(location=loc, argument=one("argument"))
        if kind in ("lambda", "local_function"):
            is_local = kind == "local_function"
            symbol = MethodSymbol(
                name=str(node.get("name") or ("<local>" if is_local else "<lambda>")),
                containing_type=owner.containing_type,
                attributes=self._attributes(node.get("attributes"), path),
                method_kind=MethodKind.LOCAL_FUNCTION if is_local else MethodKind.ANONYMOUS_FUNCTION,
            )
            return AnonymousFunction(
                location=loc,
                symbol=symbol,
                body=self._operations(node.get("body"), f"{path}.body", symbol),
                kind=OperationKind.LOCAL_FUNCTION if is_local else OperationKind.ANONYMOUS_FUNCTION,
            )
        return Block(location=loc, body=many("children"))

    @staticmethod
    def _as_argument(op: Operation) -> Operation:
        if isinstance(op, Argument):
            return op
        return Argument(location=op.location, value=op)
