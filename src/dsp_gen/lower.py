"""Lowering of graph definitions into runtime node graphs.

Each definition ID becomes exactly one :class:`~dsp_gen.nodes.Node`, so an ID
referenced from several places is one shared instance and is generated once.
"""

from __future__ import annotations

import logging

from dsp_gen.models import BinOpDef, CallDef, ConstantDef, DelayDef, GraphDef, LoopDef, NodeDef
from dsp_gen.naming import NamingAuthority
from dsp_gen.nodes import OPERATORS, Constant, Function, Loop, Node, SampleDelay
from dsp_gen.validate import validate_graph

logger = logging.getLogger(__name__)

_LITERAL_NAME = "literal"


def lower_graph(graph: GraphDef, names: NamingAuthority | None = None) -> dict[str, Node]:
    """Build runtime nodes for every definition in graph.

    Raises ValueError if the graph is invalid. Nodes are created in
    dependency order, so names are issued children-first.
    """
    errors = validate_graph(graph)
    if errors:
        raise ValueError("Invalid graph: " + "; ".join(errors))

    authority = names if names is not None else NamingAuthority()
    defs = {node.id: node for node in graph.nodes}
    built: dict[str, Node] = {}

    def operand(ref: str | float) -> Node:
        if isinstance(ref, str):
            return lower(defs[ref])
        return Constant(_LITERAL_NAME, ref, names=authority)

    def lower(d: NodeDef) -> Node:
        if d.id in built:
            return built[d.id]
        node: Node
        if isinstance(d, ConstantDef):
            node = Constant(d.name if d.name is not None else d.id, d.value, names=authority)
        elif isinstance(d, BinOpDef):
            lhs = operand(d.a)
            rhs = operand(d.b)
            node = OPERATORS[d.op](lhs, rhs, names=authority)
        elif isinstance(d, CallDef):
            node = Function(d.func, operand(d.arg), names=authority)
        elif isinstance(d, LoopDef):
            body = lower(defs[d.body])
            node = Loop(d.start, d.end, body, names=authority)
        elif isinstance(d, DelayDef):
            node = SampleDelay(operand(d.input), names=authority)
        else:  # pragma: no cover
            raise TypeError(f"Unknown node definition: {type(d).__name__}")
        built[d.id] = node
        logger.debug("lowered %s -> %r", d.id, node)
        return node

    for d in graph.nodes:
        lower(d)
    return built


def lower_root(graph: GraphDef, names: NamingAuthority | None = None) -> Node:
    """Lower graph and return the node feeding its output."""
    return lower_graph(graph, names)[graph.output]


def lower_program(
    graph: GraphDef, names: NamingAuthority | None = None
) -> tuple[Node, list[Node]]:
    """Lower graph and return (output node, prelude nodes)."""
    built = lower_graph(graph, names)
    return built[graph.output], [built[pid] for pid in graph.prelude]
