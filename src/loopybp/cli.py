"""
Command-line interface for running loopy belief propagation on a labeling problem.
"""

from __future__ import annotations

import argparse
import json
import pathlib
import sys

from loopybp.adjacency_parser import coerce_id, read_adjacency_file, read_evidence_file
from loopybp.belief_propagation import Graph
from loopybp.config import PRIOR_POLICIES, BPConfig
from loopybp.errors import LoopyBPError
from loopybp.problems import (
    petersen_adjacency,
    sudoku_adjacency,
    sudoku_labels,
)

PROBLEMS = ("petersen", "sudoku")


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="Approximate MAP labeling with loopy max-product belief propagation.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "-a",
        "--adjacency",
        type=pathlib.Path,
        help="JSON document with 'labels' and 'adjacency'",
    )
    source.add_argument(
        "--problem",
        choices=PROBLEMS,
        default="petersen",
        help="Built-in problem used when no adjacency file is given",
    )
    parser.add_argument(
        "-e",
        "--evidence",
        type=pathlib.Path,
        help="JSON document mapping node -> label -> probability",
    )
    parser.add_argument(
        "-n",
        "--iterations",
        type=int,
        default=40,
        help="Number of message passing rounds",
    )
    parser.add_argument(
        "--epsilon",
        type=float,
        default=1e-5,
        help="Potential for equal labels on adjacent nodes",
    )
    parser.add_argument(
        "--evidence-floor",
        type=float,
        default=1e-6,
        help="Probability given to labels missing from evidence",
    )
    parser.add_argument(
        "--prior",
        choices=PRIOR_POLICIES,
        default="random",
        help="Initial node prior",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random prior",
    )
    parser.add_argument(
        "--labels",
        nargs="+",
        default=None,
        help="Label set for the petersen problem (not allowed with --adjacency or --problem sudoku)",
    )
    parser.add_argument(
        "--map",
        action="store_true",
        help="Print the most probable label of every node instead of full beliefs",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=pathlib.Path,
        help="Write beliefs and MAP assignment as JSON",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Report the message residual after every round",
    )
    return parser


def load_problem(args):
    """Return ``(adjacency, labels)`` selected by the parsed arguments."""
    if args.adjacency is not None:
        return read_adjacency_file(str(args.adjacency))
    if args.problem == "sudoku":
        return sudoku_adjacency(), sudoku_labels()
    if args.labels:
        return petersen_adjacency(), [coerce_id(label) for label in args.labels]
    return petersen_adjacency(), ["red", "green", "blue"]


def _report_round(round_index: int, residual: float) -> None:
    print(f"round {round_index + 1}: residual {residual:.3e}")


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.iterations < 0:
        print(f"Error: iterations must be non-negative, got {args.iterations}", file=sys.stderr)
        return 1

    if args.labels and (args.adjacency is not None or args.problem != "petersen"):
        print("Error: --labels only applies to the petersen problem", file=sys.stderr)
        return 1

    config = BPConfig(
        epsilon=args.epsilon,
        evidence_floor=args.evidence_floor,
        prior=args.prior,
        seed=args.seed,
    )

    try:
        adjacency, labels = load_problem(args)
        evidence = read_evidence_file(str(args.evidence)) if args.evidence else {}
        graph = Graph(adjacency, labels, config=config)
        for node_id, distribution in evidence.items():
            graph.set_evidence(node_id, distribution)
    except (OSError, ValueError, LoopyBPError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    callback = _report_round if args.verbose else None
    info = graph.run_inference(args.iterations, callback=callback)
    if args.verbose:
        print(info)

    beliefs = graph.beliefs()
    assignment = graph.map_assignment()
    if args.map:
        for node_id, label in assignment.items():
            print(f"{node_id}: {label}")
    else:
        for node_id, distribution in beliefs.items():
            print(f"{node_id}\n{json.dumps({str(k): v for k, v in distribution.items()}, indent=4)}")

    if args.output is not None:
        document = {
            "iterations": info.iterations,
            "beliefs": {
                str(node_id): {str(label): p for label, p in distribution.items()}
                for node_id, distribution in beliefs.items()
            },
            "assignment": {str(node_id): label for node_id, label in assignment.items()},
        }
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(json.dumps(document, indent=4), encoding="utf-8")
        print(f"Wrote {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
