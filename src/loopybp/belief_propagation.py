"""
Loopy max-product belief propagation in the log domain.

One round is a synchronous two-phase sweep:

1. :func:`update_messages` - every node reads the committed messages of the
   previous round and stages its outgoing messages on each incident edge.
2. :func:`commit_messages` - every edge replaces its live messages with the
   staged ones and normalizes them.

:func:`calculate_beliefs` runs once after the last round.
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Iterable, Mapping
from typing import Callable, Dict, Hashable, List, Optional, Sequence, Union

import torch

from .config import BPConfig
from .errors import InvalidArgument, InvalidTopology, NodeNotFound
from .model import Edge, LabelSet, Node
from .potentials import Potential, not_equal_potential, potential_table
from .primitives import normalize_log

RoundCallback = Callable[[int, float], Optional[bool]]


class BPInfo:
    """Summary of a call to :meth:`Graph.run_inference`."""

    def __init__(self, converged: bool, iterations: int, residual: float):
        self.converged = converged
        self.iterations = iterations
        self.residual = residual

    def __repr__(self):
        status = "converged" if self.converged else "not converged"
        return f"BPInfo({status}, iterations={self.iterations}, residual={self.residual:.3e})"


def _check_node_id(node_id) -> None:
    try:
        hash(node_id)
    except TypeError:
        raise InvalidTopology(f"Node id {node_id!r} is not hashable.") from None


def initial_prior(config: BPConfig, num_labels: int, generator=None) -> torch.Tensor:
    """
    Build a node prior according to ``config.prior``.

    ``"random"`` draws ``log(uniform(0, 1))`` per label to break symmetry;
    ``"uniform"`` gives every label the same mass. Both are normalized.
    """
    if config.prior == "uniform":
        return normalize_log(torch.zeros(num_labels, dtype=config.dtype))
    draws = torch.rand(num_labels, generator=generator, dtype=config.dtype)
    draws = draws.clamp_min(torch.finfo(config.dtype).tiny)
    return normalize_log(torch.log(draws))


class Graph:
    """Pairwise Markov random field over an undirected graph."""

    def __init__(
        self,
        adjacency: Mapping[Hashable, Sequence[Hashable]],
        labels: Union[LabelSet, Iterable[Hashable]],
        config: Optional[BPConfig] = None,
        potential: Optional[Potential] = None,
    ):
        """
        Construct nodes and deduplicated edges from an adjacency specification.

        Args:
            adjacency: Mapping node id -> neighbor ids. Nodes referenced only as
                neighbors are created too; ``u -> [v]`` and ``v -> [u]`` give a
                single edge.
            labels: Ordered label set shared by all nodes
            config: Engine constants (defaults to ``BPConfig()``)
            potential: Pairwise log-score; defaults to
                ``not_equal_potential(config.epsilon)``
        """
        config = (config or BPConfig()).validate()
        label_set = labels if isinstance(labels, LabelSet) else LabelSet(labels)
        if potential is None:
            potential = not_equal_potential(config.epsilon)
        table = potential_table(label_set, potential, dtype=config.dtype)

        if not isinstance(adjacency, Mapping):
            raise InvalidTopology(
                f"Adjacency must be a mapping of node id to neighbors, got {type(adjacency).__name__}."
            )

        generator = config.make_generator()
        num_labels = len(label_set)
        nodes: Dict[Hashable, Node] = {}
        edges: List[Edge] = []

        def get_or_create(node_id) -> Node:
            node = nodes.get(node_id)
            if node is None:
                node = Node(node_id, initial_prior(config, num_labels, generator))
                nodes[node_id] = node
            return node

        for node_id, neighbor_ids in adjacency.items():
            _check_node_id(node_id)
            if isinstance(neighbor_ids, (str, bytes)) or not isinstance(neighbor_ids, Iterable):
                raise InvalidTopology(
                    f"Neighbors of node {node_id!r} must be a sequence of node ids, "
                    f"got {neighbor_ids!r}."
                )
            node = get_or_create(node_id)
            for neighbor_id in neighbor_ids:
                _check_node_id(neighbor_id)
                if neighbor_id == node_id:
                    raise InvalidTopology(f"Self-loop on node {node_id!r} is not allowed.")
                neighbor = get_or_create(neighbor_id)
                if neighbor_id in node.edges:
                    continue
                edge_index = len(edges)
                edges.append(Edge(node_id, neighbor_id, num_labels, dtype=config.dtype))
                node.add_edge(neighbor_id, edge_index)
                neighbor.add_edge(node_id, edge_index)

        self.config = config
        self.labels = label_set
        self.potential = potential
        self.potential_table = table
        self.nodes = nodes
        self.edges = edges

    @property
    def node_ids(self) -> List[Hashable]:
        return list(self.nodes)

    def num_nodes(self) -> int:
        return len(self.nodes)

    def num_edges(self) -> int:
        return len(self.edges)

    def _node(self, node_id) -> Node:
        try:
            return self.nodes[node_id]
        except (KeyError, TypeError):
            raise NodeNotFound(node_id) from None

    def neighbors(self, node_id) -> List[Hashable]:
        return list(self._node(node_id).edges)

    def edge_between(self, id1, id2) -> Edge:
        node = self._node(id1)
        self._node(id2)
        if id2 not in node.edges:
            raise InvalidArgument(f"No edge between {id1!r} and {id2!r}.")
        return self.edges[node.edges[id2]]

    def set_evidence(self, node_id, distribution: Mapping[Hashable, float]) -> None:
        """
        Replace a node's prior with (soft) evidence.

        Labels missing from ``distribution`` or given zero probability get
        ``config.evidence_floor`` so the log prior stays finite. The result is
        normalized and also becomes the node's current belief.

        Args:
            node_id: Node to clamp or bias
            distribution: Mapping label -> non-negative probability (or weight)
        """
        node = self._node(node_id)
        if not isinstance(distribution, Mapping):
            raise InvalidArgument(
                f"Evidence must be a mapping of label to probability, got {type(distribution).__name__}."
            )
        unknown = [label for label in distribution if label not in self.labels]
        if unknown:
            raise InvalidArgument(f"Evidence for node {node_id!r} has unknown labels {unknown!r}.")

        floor = self.config.evidence_floor
        probabilities = []
        for label in self.labels:
            try:
                value = float(distribution.get(label, 0.0))
            except (TypeError, ValueError):
                raise InvalidArgument(
                    f"Evidence probability for label {label!r} of node {node_id!r} is not a number."
                ) from None
            if math.isnan(value) or math.isinf(value) or value < 0.0:
                raise InvalidArgument(
                    f"Evidence probability for label {label!r} of node {node_id!r} "
                    f"must be finite and non-negative, got {value}."
                )
            probabilities.append(value if value > 0.0 else floor)

        log_prior = normalize_log(torch.log(torch.tensor(probabilities, dtype=self.config.dtype)))
        node.log_prior = log_prior
        node.log_belief = log_prior.clone()

    def reset_messages(self) -> None:
        """Return every edge to uniform messages."""
        for edge in self.edges:
            edge.reset()

    def run_inference(
        self,
        iterations: int,
        warm_start: bool = False,
        tol: Optional[float] = None,
        callback: Optional[RoundCallback] = None,
    ) -> BPInfo:
        """
        Run ``iterations`` synchronous rounds, then compute beliefs.

        Args:
            iterations: Number of rounds; 0 leaves beliefs equal to the priors
            warm_start: Continue from the current messages instead of uniform ones
            tol: Stop early once no log-message changes by more than ``tol``.
                None (default) always runs the full budget.
            callback: Called as ``callback(round_index, residual)`` after each
                round; returning True stops the sweep at that round boundary.

        Returns:
            BPInfo describing the run
        """
        if isinstance(iterations, bool) or not isinstance(iterations, numbers.Integral):
            raise InvalidArgument(f"iterations must be an integer, got {iterations!r}")
        if iterations < 0:
            raise InvalidArgument(f"iterations must be non-negative, got {iterations}")
        if tol is not None and not tol >= 0.0:
            raise InvalidArgument(f"tol must be non-negative, got {tol}")

        if not warm_start:
            self.reset_messages()

        residual = 0.0
        converged = False
        completed = 0
        for round_index in range(iterations):
            update_messages(self)
            residual = commit_messages(self)
            completed = round_index + 1

            stop = callback is not None and bool(callback(round_index, residual))
            if tol is not None and residual <= tol:
                converged = True
                break
            if stop:
                break

        calculate_beliefs(self)
        return BPInfo(converged=converged, iterations=completed, residual=residual)

    def _to_probabilities(self, log_values: torch.Tensor) -> Dict[Hashable, float]:
        return dict(zip(self.labels, torch.exp(log_values).tolist()))

    def get_beliefs(self, node_id) -> Dict[Hashable, float]:
        """Belief of a node as a mapping label -> probability."""
        return self._to_probabilities(self._node(node_id).log_belief)

    def beliefs(self) -> Dict[Hashable, Dict[Hashable, float]]:
        """Beliefs of every node, keyed by node id."""
        return {node_id: self._to_probabilities(node.log_belief) for node_id, node in self.nodes.items()}

    def get_message(self, from_id, to_id) -> Dict[Hashable, float]:
        """Committed message sent by ``from_id`` and delivered to ``to_id``."""
        edge = self.edge_between(from_id, to_id)
        return self._to_probabilities(edge.get_message(to_id))

    def map_assignment(self) -> Dict[Hashable, Hashable]:
        """Most probable label of every node (ties go to the earlier label)."""
        return {
            node_id: self.labels[int(torch.argmax(node.log_belief))]
            for node_id, node in self.nodes.items()
        }

    def __repr__(self):
        return (
            f"Graph(nodes={self.num_nodes()}, edges={self.num_edges()}, "
            f"labels={len(self.labels)})"
        )


def compute_node_messages(graph: Graph, node: Node) -> None:
    """
    Stage the outgoing messages of one node.

    m_{n→k}(y) = max_x [ prior_n(x) + Σ_{j∈ne(n)\\k} m_{j→n}(x) + ψ(y, x) ]
    """
    incoming = {
        neighbor_id: graph.edges[edge_index].get_message(node.id)
        for neighbor_id, edge_index in node.edges.items()
    }
    # committed messages are finite, so removing the recipient's own message
    # from the full sum is exact up to rounding
    total = node.log_prior
    for message in incoming.values():
        total = total + message
    for neighbor_id, edge_index in node.edges.items():
        product = total - incoming[neighbor_id]
        # table[y, x] + product[x], maximized over x
        outgoing = (graph.potential_table + product.unsqueeze(0)).max(dim=1).values
        graph.edges[edge_index].set_new_message(neighbor_id, outgoing)


def update_messages(graph: Graph) -> None:
    """Node phase: read committed messages, write staging buffers only."""
    for node in graph.nodes.values():
        compute_node_messages(graph, node)


def commit_messages(graph: Graph) -> float:
    """
    Edge phase: publish and normalize the staged messages.

    Returns:
        Largest absolute change of any committed log-message
    """
    residual = 0.0
    for edge in graph.edges:
        residual = max(residual, edge.commit())
    return residual


def calculate_beliefs(graph: Graph) -> None:
    """belief(x) = prior(x) + Σ incoming m(x), normalized."""
    for node in graph.nodes.values():
        belief = node.log_prior
        for edge_index in node.edges.values():
            belief = belief + graph.edges[edge_index].get_message(node.id)
        node.log_belief = normalize_log(belief)
