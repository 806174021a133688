"""
loopybp: approximate MAP labeling with loopy max-product belief propagation.

Builds a pairwise Markov random field from an adjacency list and a label set,
then passes log-domain messages along its edges until the node beliefs settle.
Used for constraint-style problems such as graph coloring and Sudoku.
"""

from loopybp.adjacency_parser import (
    read_adjacency_file,
    read_adjacency_from_string,
    read_evidence_file,
    read_evidence_from_string,
)
from loopybp.belief_propagation import (
    BPInfo,
    Graph,
    calculate_beliefs,
    commit_messages,
    update_messages,
)
from loopybp.config import BPConfig
from loopybp.errors import InvalidArgument, InvalidTopology, LoopyBPError, NodeNotFound
from loopybp.model import Edge, LabelSet, Node
from loopybp.potentials import equal_potential, not_equal_potential, potential_table
from loopybp.primitives import log_sum_exp, normalize_log

__version__ = "0.1.0"
__all__ = [
    # Parsing
    "read_adjacency_file",
    "read_adjacency_from_string",
    "read_evidence_file",
    "read_evidence_from_string",
    # Belief Propagation
    "BPConfig",
    "BPInfo",
    "Graph",
    "calculate_beliefs",
    "commit_messages",
    "update_messages",
    # Data model
    "Edge",
    "LabelSet",
    "Node",
    # Potentials and primitives
    "equal_potential",
    "not_equal_potential",
    "potential_table",
    "log_sum_exp",
    "normalize_log",
    # Errors
    "InvalidArgument",
    "InvalidTopology",
    "LoopyBPError",
    "NodeNotFound",
]
