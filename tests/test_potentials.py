import math

import pytest
import torch

from loopybp import Graph
from loopybp.errors import InvalidArgument
from loopybp.potentials import equal_potential, not_equal_potential, potential_table


def test_not_equal_potential_values():
    potential = not_equal_potential(1e-5)
    assert potential("red", "red") == pytest.approx(math.log(1e-5))
    assert potential("red", "blue") == 0.0


def test_equal_potential_values():
    potential = equal_potential(0.1)
    assert potential(1, 1) == 0.0
    assert potential(1, 2) == pytest.approx(math.log(0.1))


@pytest.mark.parametrize("epsilon", [0.0, -1e-3, 1.5])
def test_invalid_epsilon(epsilon):
    with pytest.raises(InvalidArgument, match="epsilon"):
        not_equal_potential(epsilon)


def test_potential_table_layout():
    labels = ["a", "b", "c"]
    table = potential_table(labels, not_equal_potential(1e-2))
    assert table.shape == (3, 3)
    assert table.dtype == torch.float64
    expected_diag = torch.full((3,), math.log(1e-2), dtype=torch.float64)
    assert torch.allclose(torch.diagonal(table), expected_diag)
    assert table[0, 1].item() == 0.0
    assert table[2, 0].item() == 0.0


def test_potential_table_custom_function():
    labels = [0, 1, 2]
    table = potential_table(labels, lambda a, b: -abs(a - b))
    assert table[0, 2].item() == -2.0
    assert table[1, 1].item() == 0.0


def test_potential_table_rejects_nan():
    with pytest.raises(InvalidArgument, match="finite"):
        potential_table([0, 1], lambda a, b: float("nan"))


def test_potential_table_allows_partial_neg_inf():
    table = potential_table([0, 1, 2], lambda a, b: float("-inf") if a == b else 0.0)
    assert torch.isneginf(torch.diagonal(table)).all()


def test_potential_table_rejects_row_without_finite_entry():
    def only_zero_receives(a, b):
        return 0.0 if a == 0 else float("-inf")

    with pytest.raises(InvalidArgument, match=r"recipient labels \[1\]"):
        potential_table([0, 1], only_zero_receives)


def test_graph_rejects_unusable_potential_at_construction():
    def hard_not_equal(a, b):
        return float("-inf") if a == b else 0.0

    with pytest.raises(InvalidArgument, match="-inf"):
        Graph({1: [2], 3: [4]}, ["A"], potential=hard_not_equal)
