from __future__ import annotations

import re
from collections import defaultdict

from dsp_gen._deps import build_deps, is_body_edge, is_delay_edge, iter_refs
from dsp_gen.config import EmitConfig
from dsp_gen.models import CallDef, ConstantDef, GraphDef, LoopDef, NodeDef

_C_ID_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

# C and C++ reserved words; the generated routine is compiled as C++
_C_KEYWORDS = frozenset(
    {
        "alignas", "alignof", "and", "and_eq", "asm", "auto", "bitand", "bitor",
        "bool", "break", "case", "catch", "char", "char8_t", "char16_t", "char32_t",
        "class", "co_await", "co_return", "co_yield", "compl", "concept", "const",
        "const_cast", "consteval", "constexpr", "constinit", "continue", "decltype",
        "default", "delete", "do", "double", "dynamic_cast", "else", "enum",
        "explicit", "export", "extern", "false", "float", "for", "friend", "goto",
        "if", "inline", "int", "long", "mutable", "namespace", "new", "noexcept",
        "not", "not_eq", "nullptr", "operator", "or", "or_eq", "private",
        "protected", "public", "register", "reinterpret_cast", "requires",
        "restrict", "return", "short", "signed", "sizeof", "static",
        "static_assert", "static_cast", "struct", "switch", "template", "this",
        "thread_local", "throw", "true", "try", "typedef", "typeid", "typename",
        "union", "unsigned", "using", "virtual", "void", "volatile", "wchar_t",
        "while", "xor", "xor_eq",
    }
)


def is_c_identifier(name: str) -> bool:
    """Return True if name can be declared in the generated source."""
    return bool(_C_ID_RE.match(name)) and name not in _C_KEYWORDS


class GraphValidationError(str):
    """A structured validation error that behaves as a plain string.

    Subclasses ``str`` so call sites can compare, join and print errors
    directly (``"; ".join(errors)``, ``print(f"error: {err}")``).
    """

    kind: str
    node_id: str | None
    field_name: str | None
    severity: str  # "error" | "warning"

    def __new__(
        cls,
        kind: str,
        message: str,
        *,
        node_id: str | None = None,
        field_name: str | None = None,
        severity: str = "error",
    ) -> GraphValidationError:
        return super().__new__(cls, message)

    def __init__(
        self,
        kind: str,
        message: str,
        *,
        node_id: str | None = None,
        field_name: str | None = None,
        severity: str = "error",
    ) -> None:
        self.kind = kind
        self.node_id = node_id
        self.field_name = field_name
        self.severity = severity


def validate_graph(graph: GraphDef) -> list[GraphValidationError]:
    """Validate a graph definition and return a list of errors (empty = valid)."""
    errors: list[GraphValidationError] = []

    # 1. Unique node IDs
    seen: set[str] = set()
    for node in graph.nodes:
        if node.id in seen:
            errors.append(
                GraphValidationError(
                    "duplicate_id", f"Duplicate node ID: '{node.id}'", node_id=node.id
                )
            )
        seen.add(node.id)

    # 2. Emitted names must be C identifiers
    for node in graph.nodes:
        if isinstance(node, ConstantDef):
            base = node.name if node.name is not None else node.id
            if not is_c_identifier(base):
                errors.append(
                    GraphValidationError(
                        "invalid_identifier",
                        f"Constant '{node.id}' name '{base}' is not a valid C identifier",
                        node_id=node.id,
                        field_name="name",
                    )
                )
        elif isinstance(node, CallDef) and not is_c_identifier(node.func):
            errors.append(
                GraphValidationError(
                    "invalid_identifier",
                    f"Call '{node.id}' function '{node.func}' is not a valid C identifier",
                    node_id=node.id,
                    field_name="func",
                )
            )
    errors.extend(validate_config(graph.config))

    # 3. Reference resolution -- every str operand resolves to a node ID,
    #    and only loop bodies may reference loops
    node_by_id = {node.id: node for node in graph.nodes}
    for node in graph.nodes:
        for field_name, value in iter_refs(node):
            if not isinstance(value, str):
                continue
            target = node_by_id.get(value)
            if target is None:
                errors.append(
                    GraphValidationError(
                        "dangling_ref",
                        f"Node '{node.id}' field '{field_name}' references unknown ID '{value}'",
                        node_id=node.id,
                        field_name=field_name,
                    )
                )
            elif isinstance(target, LoopDef) and not is_body_edge(node, field_name):
                errors.append(
                    GraphValidationError(
                        "no_value",
                        f"Node '{node.id}' field '{field_name}' uses loop '{value}', "
                        f"which produces no value",
                        node_id=node.id,
                        field_name=field_name,
                    )
                )

    # 4. Output resolution
    out_target = node_by_id.get(graph.output)
    if out_target is None:
        errors.append(
            GraphValidationError(
                "bad_output",
                f"Output '{graph.output}' does not reference a node",
                field_name="output",
            )
        )
    elif isinstance(out_target, LoopDef):
        errors.append(
            GraphValidationError(
                "no_value",
                f"Output '{graph.output}' is a loop, which produces no value",
                node_id=graph.output,
                field_name="output",
            )
        )

    for pid in graph.prelude:
        if pid not in node_by_id:
            errors.append(
                GraphValidationError(
                    "dangling_ref",
                    f"Prelude entry '{pid}' references unknown ID",
                    node_id=pid,
                    field_name="prelude",
                )
            )

    # 5. Loop ranges
    for node in graph.nodes:
        if isinstance(node, LoopDef) and node.end < node.start:
            errors.append(
                GraphValidationError(
                    "bad_range",
                    f"Loop '{node.id}' range [{node.start}, {node.end}) is reversed",
                    node_id=node.id,
                    field_name="end",
                )
            )

    # 6. Loop bodies are declared in the loop's block, so nothing they
    #    generate may be consumed from outside that block
    roots = [*graph.prelude, graph.output]
    program = _reachable(roots, node_by_id)
    for node in graph.nodes:
        if not isinstance(node, LoopDef) or node.id not in program:
            continue
        inside = _reachable([node.body], node_by_id)
        escaped = sorted(inside & _reachable(roots, node_by_id, blocked=node.id))
        if escaped:
            errors.append(
                GraphValidationError(
                    "loop_scope",
                    f"Loop '{node.id}' body nodes are also used outside the loop: "
                    f"{', '.join(escaped)}",
                    node_id=node.id,
                    field_name="body",
                )
            )

    # 7. No cycles -- delay inputs are generated before the delay reads
    #    its state, so feedback through a delay is a cycle too
    deps = build_deps(graph)
    node_ids = list(node_by_id)

    # Kahn's algorithm
    in_degree: dict[str, int] = {nid: 0 for nid in node_ids}
    reverse: dict[str, list[str]] = defaultdict(list)
    for nid, dep_set in deps.items():
        for dep in dep_set:
            if dep in in_degree:
                in_degree[nid] += 1
                reverse[dep].append(nid)

    queue = [nid for nid, deg in in_degree.items() if deg == 0]
    visited = 0
    while queue:
        current = queue.pop()
        visited += 1
        for dependent in reverse[current]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if visited < len(node_ids):
        cycle_nodes = sorted(nid for nid, deg in in_degree.items() if deg > 0)
        through_delay = any(
            is_delay_edge(node_by_id[nid], field_name)
            for nid in cycle_nodes
            for field_name, _ in iter_refs(node_by_id[nid])
        )
        hint = " (feedback through a delay is not supported)" if through_delay else ""
        errors.append(
            GraphValidationError(
                "cycle",
                f"Graph contains a cycle through nodes: {', '.join(cycle_nodes)}{hint}",
            )
        )

    return errors


def validate_config(config: EmitConfig) -> list[GraphValidationError]:
    """Check that the routine, output and index names can be emitted."""
    errors: list[GraphValidationError] = []
    for field_name in ("routine_name", "output_name", "index_name"):
        value = getattr(config, field_name)
        if not is_c_identifier(value):
            errors.append(
                GraphValidationError(
                    "invalid_identifier",
                    f"config {field_name} '{value}' is not a valid C identifier",
                    field_name=field_name,
                )
            )
    return errors


def _reachable(
    starts: list[str], node_by_id: dict[str, NodeDef], blocked: str | None = None
) -> set[str]:
    """IDs reachable from starts through operand and body references.

    The body reference of the loop ``blocked`` is not followed.
    """
    seen: set[str] = set()
    stack = [nid for nid in starts if nid in node_by_id]
    while stack:
        nid = stack.pop()
        if nid in seen:
            continue
        seen.add(nid)
        node = node_by_id[nid]
        for field_name, value in iter_refs(node):
            if not isinstance(value, str) or value not in node_by_id:
                continue
            if nid == blocked and is_body_edge(node, field_name):
                continue
            stack.append(value)
    return seen
