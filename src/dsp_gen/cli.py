"""Command-line interface for dsp-gen."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from dsp_gen.builder import generate_source
from dsp_gen.compile import compile_graph, compile_graph_to_file
from dsp_gen.config import EmitConfig
from dsp_gen.models import GraphDef
from dsp_gen.naming import NamingAuthority
from dsp_gen.nodes import Constant, SampleDelay
from dsp_gen.validate import validate_graph
from dsp_gen.visualize import graph_to_dot, graph_to_dot_file

logger = logging.getLogger(__name__)


def setup_logging(verbose: int = 0) -> None:
    """Configure logging based on verbosity level."""
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def _load_graph(path: str) -> GraphDef:
    """Load and parse a graph JSON file."""
    text = Path(path).read_text()
    data = json.loads(text)
    return GraphDef.model_validate(data)


def _config_from_args(graph: GraphDef, args: argparse.Namespace) -> EmitConfig:
    """Apply CLI overrides on top of the graph's own config block."""
    update: dict[str, object] = {}
    if args.routine:
        update["routine_name"] = args.routine
    if args.output_name:
        update["output_name"] = args.output_name
    if args.no_persistent_state:
        update["persistent_state"] = False
    if args.declare_globals:
        update["declare_globals"] = True
    return graph.config.model_copy(update=update)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def _cmd_compile(args: argparse.Namespace) -> int:
    graph = _load_graph(args.file)
    config = _config_from_args(graph, args)
    if args.output:
        path = compile_graph_to_file(graph, args.output, config)
        logger.info("wrote %s", path)
    else:
        sys.stdout.write(compile_graph(graph, config))
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    graph = _load_graph(args.file)
    errors = validate_graph(graph)
    for err in errors:
        print(f"error: {err}", file=sys.stderr)
    if errors:
        return 1
    print("valid")
    return 0


def _cmd_dot(args: argparse.Namespace) -> int:
    graph = _load_graph(args.file)
    if args.output:
        graph_to_dot_file(graph, args.output)
    else:
        sys.stdout.write(graph_to_dot(graph))
    return 0


def _cmd_simulate(args: argparse.Namespace) -> int:
    try:
        import numpy as np
    except ImportError:
        print(
            "error: numpy is required for simulation. Install with: pip install dsp-gen[sim]",
            file=sys.stderr,
        )
        return 1

    from dsp_gen.simulate import simulate

    graph = _load_graph(args.file)
    if args.samples < 0:
        print("error: -n/--samples must be non-negative", file=sys.stderr)
        return 1

    out = simulate(graph, args.samples)
    if args.output:
        np.save(args.output, out)
        print(f"wrote {args.output} ({len(out)} samples)")
    else:
        for value in out.tolist():
            print(f"{value:f}")
    return 0


def _cmd_example(args: argparse.Namespace) -> int:
    # One-sample delay of a constant 440.0
    config = EmitConfig()
    names = NamingAuthority(reserved=config.routine_names())
    frequency = Constant("frequency", 440.0, names=names)
    delay = SampleDelay(frequency, names=names)
    sys.stdout.write(generate_source(delay, config=config, names=names))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the dsp-gen CLI."""
    parser = argparse.ArgumentParser(
        prog="dsp-gen",
        description="Generate per-sample processing routines from DSP expression graphs.",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase log verbosity"
    )
    sub = parser.add_subparsers(dest="command")

    # compile
    p_compile = sub.add_parser("compile", help="Generate the process routine")
    p_compile.add_argument("file", help="Graph JSON file")
    p_compile.add_argument("-o", "--output", help="Output directory")
    p_compile.add_argument("--routine", help="Routine name (default: process)")
    p_compile.add_argument("--output-name", help="Output buffer name (default: output)")
    p_compile.add_argument(
        "--no-persistent-state",
        action="store_true",
        help="Do not declare delay state at file scope",
    )
    p_compile.add_argument(
        "--declare-globals",
        action="store_true",
        help="Declare every generated name at file scope",
    )

    # validate
    p_validate = sub.add_parser("validate", help="Validate graph JSON")
    p_validate.add_argument("file", help="Graph JSON file")

    # dot
    p_dot = sub.add_parser("dot", help="Generate DOT visualization")
    p_dot.add_argument("file", help="Graph JSON file")
    p_dot.add_argument("-o", "--output", help="Output directory")

    # simulate
    p_sim = sub.add_parser("simulate", help="Evaluate the graph with numpy")
    p_sim.add_argument("file", help="Graph JSON file")
    p_sim.add_argument("-n", "--samples", type=int, required=True, help="Number of samples")
    p_sim.add_argument("-o", "--output", help="Write samples to a .npy file")

    # example
    sub.add_parser("example", help="Print the routine for a delayed 440.0 constant")

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if not args.command:
        parser.print_help(sys.stderr)
        return 1

    try:
        if args.command == "compile":
            return _cmd_compile(args)
        elif args.command == "validate":
            return _cmd_validate(args)
        elif args.command == "dot":
            return _cmd_dot(args)
        elif args.command == "simulate":
            return _cmd_simulate(args)
        elif args.command == "example":
            return _cmd_example(args)
    except FileNotFoundError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"error: invalid JSON: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"error: invalid graph: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except RecursionError:
        print(
            "error: graph is too deep to generate (exceeds the interpreter recursion limit)",
            file=sys.stderr,
        )
        return 1

    return 0  # pragma: no cover


if __name__ == "__main__":
    sys.exit(main())
