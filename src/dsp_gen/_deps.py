"""Shared reference helpers for graph definitions."""

from __future__ import annotations

from collections import defaultdict

from dsp_gen.models import DelayDef, GraphDef, LoopDef

# Fields that are not operand references
_NON_REF_FIELDS = frozenset({"id", "op", "name", "func", "value", "start", "end"})


def iter_refs(node: object) -> list[tuple[str, str | float]]:
    """Return (field_name, value) for every operand field of a node definition."""
    refs: list[tuple[str, str | float]] = []
    for field_name, value in node.__dict__.items():
        if field_name in _NON_REF_FIELDS:
            continue
        if isinstance(value, (str, int, float)) and not isinstance(value, bool):
            refs.append((field_name, value))
    return refs


def is_delay_edge(node: object, field_name: str) -> bool:
    """Return True if a field feeds a one-sample delay's stored state."""
    return isinstance(node, DelayDef) and field_name == "input"


def is_body_edge(node: object, field_name: str) -> bool:
    """Return True if a field is a loop body rather than a consumed value."""
    return isinstance(node, LoopDef) and field_name == "body"


def build_deps(graph: GraphDef) -> dict[str, set[str]]:
    """Build dependency map: {node_id: set of node_ids it references}.

    Literal operands and unknown IDs are skipped.
    """
    node_ids = {node.id for node in graph.nodes}
    deps: dict[str, set[str]] = defaultdict(set)
    for node in graph.nodes:
        for _field_name, value in iter_refs(node):
            if isinstance(value, str) and value in node_ids:
                deps[node.id].add(value)
    return deps
