from __future__ import annotations

from trimcheck.naming import is_named_type
from trimcheck.symbols import NamedTypeSymbol, NamespaceSymbol

RUC = "System.Diagnostics.CodeAnalysis.RequiresUnreferencedCodeAttribute"


def _ns(dotted: str) -> NamespaceSymbol:
    current = NamespaceSymbol(name="")
    for part in dotted.split(".") if dotted else []:
        current = NamespaceSymbol(name=part, containing_namespace=current)
    return current


def _type(dotted: str, assembly: str = "") -> NamedTypeSymbol:
    namespace, _, name = dotted.rpartition(".")
    return NamedTypeSymbol(name=name, containing_namespace=_ns(namespace), assembly=assembly)


def test_matches_full_qualified_name():
    assert is_named_type(_type(RUC), RUC)


def test_distinct_symbols_from_different_assemblies_both_match():
    platform = _type(RUC, assembly="System.Runtime")
    polyfill = _type(RUC, assembly="Some.Polyfills")
    assert platform is not polyfill
    assert is_named_type(platform, RUC)
    assert is_named_type(polyfill, RUC)


def test_comparison_is_ordinal():
    assert not is_named_type(_type(RUC), RUC.lower())


def test_partial_name_does_not_match():
    # the symbol lives deeper than the name says
    assert not is_named_type(_type(RUC), "RequiresUnreferencedCodeAttribute")
    assert not is_named_type(_type(RUC), "CodeAnalysis.RequiresUnreferencedCodeAttribute")


def test_name_deeper_than_chain_does_not_match():
    t = _type("Diagnostics.CodeAnalysis.RequiresUnreferencedCodeAttribute")
    assert not is_named_type(t, RUC)


def test_global_namespace_type():
    t = _type("Marked")
    assert is_named_type(t, "Marked")
    assert not is_named_type(t, "X.Marked")


def test_leading_dot_anchors_at_root():
    assert is_named_type(_type(RUC), "." + RUC)
    assert is_named_type(_type("Marked"), ".Marked")


def test_nested_type_walks_containing_types_first():
    outer = _type("Demo.Outer")
    inner = NamedTypeSymbol(name="Inner", containing_type=outer)
    assert is_named_type(inner, "Demo.Outer.Inner")
    assert not is_named_type(inner, "Demo.Inner")


def test_empty_or_missing_inputs_never_match():
    t = _type(RUC)
    assert not is_named_type(t, "")
    assert not is_named_type(t, ".")
    assert not is_named_type(None, RUC)


def test_symbol_without_namespace_chain():
    detached = NamedTypeSymbol(name="Marked")
    assert is_named_type(detached, "Marked")
    assert not is_named_type(detached, "Demo.Marked")


def test_same_name_gives_same_answer():
    t = _type(RUC)
    name_a = "System.Diagnostics.CodeAnalysis." + "RequiresUnreferencedCodeAttribute"
    name_b = RUC
    assert is_named_type(t, name_a) == is_named_type(t, name_b)
