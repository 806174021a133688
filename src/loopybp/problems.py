"""
Adjacency builders for constraint problems solved with the not-equal potential.
"""

from __future__ import annotations

from typing import Dict, Hashable, List, Sequence

import numpy as np

from .errors import InvalidArgument


def petersen_adjacency() -> Dict[int, List[int]]:
    """Petersen graph (10 nodes, 3-regular, chromatic number 3)."""
    return {
        1: [3, 4, 10],
        2: [5, 4, 9],
        3: [1, 5, 8],
        4: [2, 1, 7],
        5: [2, 3, 6],
        6: [5, 10, 7],
        7: [4, 6, 8],
        8: [3, 7, 9],
        9: [2, 8, 10],
        10: [1, 6, 9],
    }


def _check_box(box: int) -> int:
    if isinstance(box, bool) or not isinstance(box, (int, np.integer)) or box < 1:
        raise InvalidArgument(f"box must be a positive integer, got {box!r}")
    return int(box)


def sudoku_cell(row: int, col: int, box: int = 3) -> int:
    """Node id of a Sudoku cell, numbered row-major from 1."""
    return row * box * box + col + 1


def sudoku_labels(box: int = 3) -> List[int]:
    """Digits ``1..box**2``."""
    box = _check_box(box)
    return list(range(1, box * box + 1))


def sudoku_adjacency(box: int = 3) -> Dict[int, List[int]]:
    """
    Constraint graph of a ``box**2 x box**2`` Sudoku board.

    Two cells are adjacent when they share a row, a column or a box. Each
    edge appears in both directions; graph construction deduplicates them.

    Args:
        box: Side length of a box (3 for the standard 9x9 board)

    Returns:
        Mapping cell id -> neighbor cell ids
    """
    box = _check_box(box)
    size = box * box
    ids = np.arange(1, size * size + 1).reshape(size, size)
    adjacency: Dict[int, List[int]] = {}
    for row in range(size):
        for col in range(size):
            top, left = box * (row // box), box * (col // box)
            peers = set(ids[row, :].tolist())
            peers.update(ids[:, col].tolist())
            peers.update(ids[top : top + box, left : left + box].ravel().tolist())
            cell = int(ids[row, col])
            peers.discard(cell)
            adjacency[cell] = sorted(peers)
    return adjacency


def sudoku_evidence(
    grid: Sequence[Sequence[int]], box: int = 3
) -> Dict[int, Dict[int, float]]:
    """
    Evidence clamping every clue of a Sudoku grid.

    Args:
        grid: ``box**2 x box**2`` nested sequence or array; 0 marks an empty cell
        box: Side length of a box

    Returns:
        Mapping cell id -> {digit: 1.0}
    """
    box = _check_box(box)
    size = box * box
    cells = np.asarray(grid)
    if cells.shape != (size, size):
        raise InvalidArgument(f"Sudoku grid must have shape {(size, size)}, got {cells.shape}")
    if not np.issubdtype(cells.dtype, np.integer):
        raise InvalidArgument(f"Sudoku grid must hold integers, got dtype {cells.dtype}")
    if cells.min() < 0 or cells.max() > size:
        raise InvalidArgument(f"Sudoku digits must be in 0..{size}")
    evidence: Dict[int, Dict[int, float]] = {}
    for row, col in zip(*np.nonzero(cells)):
        evidence[sudoku_cell(int(row), int(col), box)] = {int(cells[row, col]): 1.0}
    return evidence


def assignment_to_grid(assignment: Dict[Hashable, int], box: int = 3) -> np.ndarray:
    """Arrange a MAP assignment over Sudoku cells back into a grid."""
    box = _check_box(box)
    size = box * box
    grid = np.zeros((size, size), dtype=int)
    for row in range(size):
        for col in range(size):
            grid[row, col] = assignment[sudoku_cell(row, col, box)]
    return grid


def is_proper_coloring(adjacency: Dict[Hashable, Sequence[Hashable]], assignment: Dict[Hashable, Hashable]) -> bool:
    """True when no two adjacent nodes share a label."""
    return all(
        assignment[node] != assignment[neighbor]
        for node, neighbors in adjacency.items()
        for neighbor in neighbors
    )
