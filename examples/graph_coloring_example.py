"""
Graph Coloring with Loopy Belief Propagation
============================================

Colors the Petersen graph with three colors. One node is clamped to break
the color permutation symmetry; the remaining priors are random.

Run with: uv run python examples/graph_coloring_example.py
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from loopybp import BPConfig, Graph, read_adjacency_file
from loopybp.problems import is_proper_coloring


def main():
    adjacency, labels = read_adjacency_file(str(Path(__file__).parent / "petersen.json"))
    graph = Graph(adjacency, labels, config=BPConfig(seed=42))
    graph.set_evidence(1, {"red": 1.0})

    info = graph.run_inference(40)
    print(info)

    assignment = graph.map_assignment()
    for node_id, label in assignment.items():
        beliefs = graph.get_beliefs(node_id)
        print(f"{node_id:>3}: {label:<6} p={beliefs[label]:.4f}")

    print(f"\nProper coloring: {is_proper_coloring(adjacency, assignment)}")


if __name__ == "__main__":
    main()
