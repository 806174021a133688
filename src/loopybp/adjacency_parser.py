"""
JSON reader for adjacency and evidence documents.

Adjacency document::

    {"labels": ["red", "green", "blue"],
     "adjacency": {"1": [2, 3], "2": [3]}}

Evidence document (node -> label -> probability)::

    {"1": {"red": 1.0}}

JSON object keys are always strings; keys and labels that look like integers
are converted back to ``int`` so they match integer node ids.
"""

from __future__ import annotations

import json
from typing import Dict, Hashable, List, Tuple

from .errors import InvalidTopology

Adjacency = Dict[Hashable, List[Hashable]]
Evidence = Dict[Hashable, Dict[Hashable, float]]


def coerce_id(value):
    """Map ``"12"`` to ``12``; leave every other value untouched."""
    if isinstance(value, str):
        stripped = value.strip()
        digits = stripped[1:] if stripped[:1] in ("-", "+") else stripped
        if digits.isdecimal():
            return int(stripped)
    return value


def _check_scalar(value, what: str):
    if isinstance(value, (list, dict)) or value is None:
        raise InvalidTopology(f"{what} must be a string or integer, got {value!r}.")
    return coerce_id(value)


def parse_adjacency(document) -> Tuple[Adjacency, List[Hashable]]:
    """
    Validate a decoded adjacency document.

    Args:
        document: Decoded JSON object with ``labels`` and ``adjacency`` keys

    Returns:
        Tuple ``(adjacency, labels)``
    """
    if not isinstance(document, dict):
        raise ValueError("Adjacency document must be a JSON object.")
    missing = [key for key in ("labels", "adjacency") if key not in document]
    if missing:
        raise ValueError(f"Adjacency document is missing keys: {missing}.")

    labels = document["labels"]
    if not isinstance(labels, list):
        raise ValueError(f"'labels' must be a list, got {type(labels).__name__}.")
    labels = [_check_scalar(label, "Label") for label in labels]

    raw = document["adjacency"]
    if not isinstance(raw, dict):
        raise InvalidTopology(f"'adjacency' must be an object, got {type(raw).__name__}.")
    adjacency: Adjacency = {}
    for key, neighbors in raw.items():
        if not isinstance(neighbors, list):
            raise InvalidTopology(
                f"Neighbors of node {key!r} must be a list, got {type(neighbors).__name__}."
            )
        node_id = coerce_id(key)
        adjacency[node_id] = [_check_scalar(n, f"Neighbor of node {key!r}") for n in neighbors]
    return adjacency, labels


def read_adjacency_from_string(content: str) -> Tuple[Adjacency, List[Hashable]]:
    """Parse an adjacency document from a JSON string."""
    try:
        document = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Malformed adjacency document: {e}") from e
    return parse_adjacency(document)


def read_adjacency_file(filepath: str) -> Tuple[Adjacency, List[Hashable]]:
    """Parse an adjacency document from a ``.json`` file."""
    with open(filepath, "r", encoding="utf-8") as f:
        content = f.read()
    return read_adjacency_from_string(content)


def parse_evidence(document) -> Evidence:
    if not isinstance(document, dict):
        raise ValueError("Evidence document must be a JSON object.")
    evidence: Evidence = {}
    for key, distribution in document.items():
        if not isinstance(distribution, dict):
            raise ValueError(
                f"Evidence for node {key!r} must be an object of label -> probability."
            )
        parsed = {}
        for label, prob in distribution.items():
            if isinstance(prob, bool) or not isinstance(prob, (int, float)):
                raise ValueError(
                    f"Evidence probability for node {key!r}, label {label!r} "
                    f"must be a number, got {prob!r}."
                )
            parsed[coerce_id(label)] = float(prob)
        evidence[coerce_id(key)] = parsed
    return evidence


def read_evidence_from_string(content: str) -> Evidence:
    """Parse an evidence document from a JSON string; blank input means no evidence."""
    if not content.strip():
        return {}
    try:
        document = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Malformed evidence document: {e}") from e
    return parse_evidence(document)


def read_evidence_file(filepath: str) -> Evidence:
    """Parse an evidence ``.json`` file; an empty path means no evidence."""
    if not filepath:
        return {}
    with open(filepath, "r", encoding="utf-8") as f:
        content = f.read()
    return read_evidence_from_string(content)
