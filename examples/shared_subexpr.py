"""(frequency + sin(phase)) * frequency, with frequency feeding two parents."""

from dsp_gen import (
    BinOpDef,
    CallDef,
    ConstantDef,
    GraphDef,
    compile_graph_to_file,
    graph_to_dot_file,
    validate_graph,
)

graph = GraphDef(
    name="shared_subexpr",
    output="scaled",
    nodes=[
        ConstantDef(id="frequency", value=440.0),
        ConstantDef(id="phase", value=0.25),
        CallDef(id="s", func="sin", arg="phase"),
        BinOpDef(id="sum", op="add", a="frequency", b="s"),
        BinOpDef(id="scaled", op="mul", a="sum", b="frequency"),
    ],
)

if __name__ == "__main__":
    errors = validate_graph(graph)
    if errors:
        print("Validation errors:")
        for e in errors:
            print(f"  - {e}")
    else:
        print("Graph is valid.")
    print()
    print(graph.model_dump_json(indent=2))
    path = compile_graph_to_file(graph, "build")
    print(f"\nGenerated: {path}")
    print(path.read_text())
    dot_path = graph_to_dot_file(graph, "build")
    print(f"DOT: {dot_path}")
