"""Source generation from graph definitions."""

from __future__ import annotations

from pathlib import Path

from dsp_gen.builder import generate_source
from dsp_gen.config import EmitConfig
from dsp_gen.lower import lower_program
from dsp_gen.models import CallDef, GraphDef
from dsp_gen.naming import NamingAuthority
from dsp_gen.validate import validate_config


def compile_graph(graph: GraphDef, config: EmitConfig | None = None) -> str:
    """Compile a graph definition to a ``process`` routine.

    Uses a fresh NamingAuthority, so compiling the same graph twice gives
    the same text. Node names never shadow the routine's own identifiers or
    a function the graph calls. ``config`` overrides the graph's own config
    block. Raises ValueError if the graph or the config is invalid.
    """
    cfg = config or graph.config
    errors = validate_config(cfg)
    if errors:
        raise ValueError("Invalid config: " + "; ".join(errors))

    callees = [node.func for node in graph.nodes if isinstance(node, CallDef)]
    names = NamingAuthority(reserved=[*cfg.routine_names(), *callees])
    root, prelude = lower_program(graph, names)
    return generate_source(root, config=cfg, names=names, prelude=prelude)


def compile_graph_to_file(
    graph: GraphDef, output_dir: str | Path, config: EmitConfig | None = None
) -> Path:
    """Compile a graph definition and write {name}.cpp to output_dir.

    Creates the output directory if it doesn't exist.
    Returns the path to the written file.
    """
    code = compile_graph(graph, config)
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    path = out / f"{graph.name}.cpp"
    path.write_text(code)
    return path
