"""Graphviz DOT visualization for graph definitions."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from dsp_gen._deps import is_body_edge, is_delay_edge, iter_refs
from dsp_gen.models import BinOpDef, CallDef, ConstantDef, DelayDef, GraphDef, LoopDef

_BINOP_LABELS: dict[str, str] = {
    "add": "+",
    "sub": "-",
    "mul": "*",
    "div": "/",
    "mod": "%",
}


def _node_attrs(node: object) -> tuple[str, str, str]:
    """Return (shape, fillcolor, label) for a graph node."""
    if isinstance(node, ConstantDef):
        return "box", "#e9ecef", f"{node.id}\\n{node.value}"
    if isinstance(node, BinOpDef):
        return "box", "#fff3cd", f"{node.id}\\n{_BINOP_LABELS[node.op]}"
    if isinstance(node, CallDef):
        return "box", "#e2d5f1", f"{node.id}\\n{node.func}()"
    if isinstance(node, LoopDef):
        return "box3d", "#cce5ff", f"{node.id}\\nloop [{node.start}, {node.end})"
    if isinstance(node, DelayDef):
        return "box", "#fde0c8", f"{node.id}\\nz^-1"
    return "box", "#ffffff", str(getattr(node, "id", "?"))


def graph_to_dot(graph: GraphDef) -> str:
    """Convert a graph definition to a Graphviz DOT string."""
    lines: list[str] = []
    w = lines.append

    w(f'digraph "{graph.name}" {{')
    w("    rankdir=LR;")
    w('    node [fontname="Helvetica" fontsize=10];')
    w("")

    node_ids = {node.id for node in graph.nodes}

    # Output slot
    out_label = f"{graph.config.output_name}[{graph.config.index_name}]"
    w(
        f'    "__output__" [shape=box style="rounded,filled"'
        f' fillcolor="#f8d7da" label="{out_label}"];'
    )

    # Processing nodes
    for node in graph.nodes:
        shape, color, label = _node_attrs(node)
        w(f'    "{node.id}" [shape={shape} style=filled fillcolor="{color}" label="{label}"];')

    w("")

    # Edges from node fields; literal operands are shown in place
    for node in graph.nodes:
        for field_name, value in iter_refs(node):
            if not isinstance(value, str):
                lit_id = f"{node.id}.{field_name}"
                w(f'    "{lit_id}" [shape=plaintext label="{value}"];')
                w(f'    "{lit_id}" -> "{node.id}";')
                continue
            if value not in node_ids:
                continue
            if is_delay_edge(node, field_name):
                w(f'    "{value}" -> "{node.id}" [style=dashed label="z^-1"];')
            elif is_body_edge(node, field_name):
                w(f'    "{node.id}" -> "{value}" [style=dotted label="body"];')
            else:
                w(f'    "{value}" -> "{node.id}";')

    if graph.output in node_ids:
        w(f'    "{graph.output}" -> "__output__";')
    for pid in graph.prelude:
        if pid in node_ids:
            w(f'    "{pid}" -> "__output__" [style=dotted label="prelude"];')

    w("}")
    return "\n".join(lines) + "\n"


def graph_to_dot_file(graph: GraphDef, output_dir: str | Path) -> Path:
    """Write a DOT file for the graph to output_dir/{name}.dot.

    If the ``dot`` binary is on PATH, also renders a PDF to
    ``output_dir/{name}.pdf``.

    Returns the path to the written ``.dot`` file.
    """
    dot_src = graph_to_dot(graph)
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    dot_path = out / f"{graph.name}.dot"
    dot_path.write_text(dot_src)

    dot_bin = shutil.which("dot")
    if dot_bin is not None:
        pdf_path = out / f"{graph.name}.pdf"
        subprocess.run(
            [dot_bin, "-Tpdf", str(dot_path), "-o", str(pdf_path)],
            check=True,
        )

    return dot_path
