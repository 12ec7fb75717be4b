from __future__ import annotations

from typing import Dict, List, Tuple

from graphviz import Digraph
from graphviz.backend import ExecutableNotFound

from .diagnostics import Finding


def _get_short_name(member: str) -> str:
    """Drop namespaces, keep `Type.Member(...)` for the node label."""
    if not member:
        return "<unknown>"
    head, paren, params = member.partition("(")
    parts = head.split(".")
    # accessors render as Type.Prop.get
    keep = 3 if parts[-1] in ("get", "set") else 2
    return ".".join(parts[-keep:]) + paren + params


def _collect_edges(findings: List[Finding]) -> Dict[Tuple[str, str], int]:
    edges: Dict[Tuple[str, str], int] = {}
    for f in findings:
        key = (f.caller or "<unknown>", f.member)
        edges[key] = edges.get(key, 0) + 1
    return edges


def build_findings_graph(findings: List[Finding]) -> Digraph:
    dot = Digraph(
        "trimcheck",
        graph_attr={
            "rankdir": "LR",
            "splines": "spline",
            "label": "RequiresUnreferencedCode call sites",
            "labelloc": "t",
        },
        node_attr={"shape": "box", "style": "rounded,filled", "fontname": "Helvetica"},
        edge_attr={"arrowhead": "vee"},
    )

    edges = _collect_edges(findings)
    callers = sorted({src for src, _ in edges})
    marked = sorted({dst for _, dst in edges})

    for name in callers:
        if name not in marked:
            dot.node(name, label=_get_short_name(name), fillcolor="#E0E0E0")
    for name in marked:
        dot.node(name, label=_get_short_name(name), fillcolor="#F44336", fontcolor="white")

    for (src, dst), count in sorted(edges.items()):
        label = f"x{count}" if count > 1 else ""
        dot.edge(src, dst, color="#F44336", label=label)

    return dot


def render_findings_graph(
    findings: List[Finding],
    output_base: str,
    fmt: str = "svg",
) -> Tuple[str, str]:
    """Write `<output_base>.dot` and try to render it.

    Returns (dot_path, rendered_path); rendered_path is "" when the Graphviz
    executable is not installed.
    """
    dot = build_findings_graph(findings)
    dot_path = f"{output_base}.dot"
    out_path = f"{output_base}.{fmt}"
    dot.save(dot_path)

    try:
        dot.render(output_base, format=fmt, cleanup=True)
    except ExecutableNotFound:
        # Only DOT written; caller should inform user
        out_path = ""
    return dot_path, out_path
