"""
Exception types raised by the loopy belief propagation engine.
"""


class LoopyBPError(Exception):
    """Base class for all errors raised by loopybp."""


class InvalidTopology(LoopyBPError, ValueError):
    """Adjacency specification contains a self-loop or a malformed reference."""


class NodeNotFound(LoopyBPError, KeyError):
    """Query or evidence on a node id that is not part of the graph."""

    def __init__(self, node_id):
        super().__init__(node_id)
        self.node_id = node_id

    def __str__(self):
        return f"Node {self.node_id!r} does not exist in the graph."


class InvalidArgument(LoopyBPError, ValueError):
    """Empty label set, negative iteration count, empty log-sum-exp input, ..."""
