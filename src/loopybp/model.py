"""
Data model of the pairwise Markov random field: label set, nodes and edges.

Edges live in a single list owned by the graph; nodes refer to them by index
so that the two endpoints of an edge share one message store.
"""

from __future__ import annotations

from typing import Dict, Hashable, Iterable, Iterator, Tuple

import torch

from .errors import InvalidArgument, InvalidTopology
from .primitives import normalize_log


class LabelSet:
    """Ordered, immutable collection of distinct labels shared by every node."""

    def __init__(self, labels: Iterable[Hashable]):
        labels = tuple(labels)
        if not labels:
            raise InvalidArgument("Label set must contain at least one label.")
        index: Dict[Hashable, int] = {}
        for position, label in enumerate(labels):
            try:
                duplicate = label in index
            except TypeError:
                raise InvalidArgument(f"Label {label!r} is not hashable.") from None
            if duplicate:
                raise InvalidArgument(f"Duplicate label {label!r} in label set.")
            index[label] = position
        self._labels = labels
        self._index = index

    def index(self, label: Hashable) -> int:
        """Return the position of ``label``."""
        try:
            return self._index[label]
        except (KeyError, TypeError):
            raise InvalidArgument(f"Unknown label {label!r}.") from None

    def __contains__(self, label) -> bool:
        try:
            return label in self._index
        except TypeError:
            return False

    def __getitem__(self, position: int) -> Hashable:
        return self._labels[position]

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._labels)

    def __len__(self) -> int:
        return len(self._labels)

    def __eq__(self, other) -> bool:
        if isinstance(other, LabelSet):
            return self._labels == other._labels
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._labels)

    def __repr__(self):
        return f"LabelSet({list(self._labels)!r})"


def uniform_message(num_labels: int, dtype=torch.float64) -> torch.Tensor:
    """Normalized uniform log-message, ``-log(num_labels)`` everywhere."""
    return normalize_log(torch.zeros(num_labels, dtype=dtype))


class Node:
    """A random variable with its prior, its belief and its incident edges."""

    def __init__(self, id: Hashable, log_prior: torch.Tensor):
        """
        Args:
            id: Node identity (any hashable, typically int or str)
            log_prior: Normalized log-probability vector over the label set
        """
        self.id = id
        self.log_prior = log_prior
        self.log_belief = log_prior.clone()
        # neighbor id -> index of the shared edge in Graph.edges
        self.edges: Dict[Hashable, int] = {}

    def add_edge(self, neighbor_id: Hashable, edge_index: int) -> None:
        self.edges[neighbor_id] = edge_index

    @property
    def degree(self) -> int:
        return len(self.edges)

    def __repr__(self):
        return f"Node(id={self.id!r}, degree={self.degree})"


class Edge:
    """
    Undirected edge holding one live message per direction plus a staging
    buffer for the messages computed during the current round.

    Row 0 of ``messages`` is delivered to ``id1``, row 1 to ``id2``.
    """

    def __init__(self, id1: Hashable, id2: Hashable, num_labels: int, dtype=torch.float64):
        if id1 == id2:
            raise InvalidTopology(f"Self-loop on node {id1!r} is not allowed.")
        self.id1 = id1
        self.id2 = id2
        self.num_labels = num_labels
        self.dtype = dtype
        self.messages = uniform_message(num_labels, dtype).repeat(2, 1)
        self.new_messages = self.messages.clone()

    @property
    def endpoints(self) -> Tuple[Hashable, Hashable]:
        return self.id1, self.id2

    def _slot(self, to_id: Hashable) -> int:
        if to_id == self.id1:
            return 0
        if to_id == self.id2:
            return 1
        raise InvalidTopology(f"Node {to_id!r} is not an endpoint of {self!r}.")

    def opposite_id(self, node_id: Hashable) -> Hashable:
        return self.id2 if self._slot(node_id) == 0 else self.id1

    def get_message(self, to_id: Hashable) -> torch.Tensor:
        """Committed log-message delivered to ``to_id``."""
        return self.messages[self._slot(to_id)]

    def set_new_message(self, to_id: Hashable, message: torch.Tensor) -> None:
        """Stage the next round's log-message toward ``to_id``."""
        self.new_messages[self._slot(to_id)] = message

    def commit(self) -> float:
        """
        Replace the live messages with the staged ones, normalizing each
        direction independently.

        Returns:
            Largest absolute change of any log-message entry
        """
        committed = torch.stack([normalize_log(row) for row in self.new_messages])
        diff = torch.nan_to_num(
            (committed - self.messages).abs(), nan=0.0, posinf=float("inf")
        )
        self.messages = committed
        return float(diff.max())

    def reset(self) -> None:
        self.messages = uniform_message(self.num_labels, self.dtype).repeat(2, 1)
        self.new_messages = self.messages.clone()

    def __repr__(self):
        return f"Edge({self.id1!r}, {self.id2!r})"
