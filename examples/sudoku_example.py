"""
Sudoku as Graph Coloring
========================

Every cell is a node, every pair of cells sharing a row, column or box is an
edge, and the digits are the labels. Clues are injected as evidence.

Run with: uv run python examples/sudoku_example.py
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import numpy as np

from loopybp import BPConfig, Graph
from loopybp.problems import (
    assignment_to_grid,
    is_proper_coloring,
    sudoku_adjacency,
    sudoku_evidence,
    sudoku_labels,
)

PUZZLE = np.array([
    [5, 3, 0, 0, 7, 0, 0, 0, 0],
    [6, 0, 0, 1, 9, 5, 0, 0, 0],
    [0, 9, 8, 0, 0, 0, 0, 6, 0],
    [8, 0, 0, 0, 6, 0, 0, 0, 3],
    [4, 0, 0, 8, 0, 3, 0, 0, 1],
    [7, 0, 0, 0, 2, 0, 0, 0, 6],
    [0, 6, 0, 0, 0, 0, 2, 8, 0],
    [0, 0, 0, 4, 1, 9, 0, 0, 5],
    [0, 0, 0, 0, 8, 0, 0, 7, 9],
])


def main():
    adjacency = sudoku_adjacency()
    graph = Graph(adjacency, sudoku_labels(), config=BPConfig(prior="uniform"))
    for cell, distribution in sudoku_evidence(PUZZLE).items():
        graph.set_evidence(cell, distribution)

    info = graph.run_inference(
        60, callback=lambda i, residual: print(f"round {i + 1}: residual {residual:.3e}")
    )
    print(info)

    assignment = graph.map_assignment()
    print(assignment_to_grid(assignment))
    print(f"Constraints satisfied: {is_proper_coloring(adjacency, assignment)}")


if __name__ == "__main__":
    main()
