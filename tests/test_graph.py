import unittest

import torch

try:
    from ._path import add_project_root_to_path
except ImportError:
    from _path import add_project_root_to_path

add_project_root_to_path()

from loopybp import BPConfig, Graph, LabelSet
from loopybp.errors import InvalidArgument, InvalidTopology, NodeNotFound
from loopybp.model import Edge


class TestLabelSet(unittest.TestCase):
    def test_order_and_index(self):
        labels = LabelSet(["red", "green", "blue"])
        self.assertEqual(list(labels), ["red", "green", "blue"])
        self.assertEqual(len(labels), 3)
        self.assertEqual(labels.index("blue"), 2)
        self.assertEqual(labels[1], "green")
        self.assertIn("red", labels)
        self.assertNotIn("yellow", labels)

    def test_empty_label_set(self):
        with self.assertRaises(InvalidArgument):
            LabelSet([])

    def test_duplicate_labels(self):
        with self.assertRaises(InvalidArgument):
            LabelSet([1, 2, 1])

    def test_unknown_label_index(self):
        with self.assertRaises(InvalidArgument):
            LabelSet(["a"]).index("b")


class TestGraphConstruction(unittest.TestCase):
    def test_bidirectional_entries_make_one_edge(self):
        graph = Graph({"u": ["v"], "v": ["u"]}, ["A", "B"])
        self.assertEqual(graph.num_edges(), 1)
        self.assertEqual(graph.num_nodes(), 2)
        self.assertEqual(graph.neighbors("u"), ["v"])
        self.assertEqual(graph.neighbors("v"), ["u"])

    def test_repeated_entries_are_deduplicated(self):
        graph = Graph({1: [2, 2, 3], 2: [1], 3: [1, 2], 4: []}, [0, 1])
        self.assertEqual(graph.num_edges(), 3)
        self.assertEqual(graph.num_nodes(), 4)
        self.assertEqual(graph.neighbors(4), [])

    def test_nodes_referenced_only_as_neighbors_are_created(self):
        graph = Graph({1: [2, 3]}, [0, 1])
        self.assertEqual(sorted(graph.node_ids), [1, 2, 3])
        self.assertEqual(graph.neighbors(3), [1])

    def test_edges_are_shared_by_both_endpoints(self):
        graph = Graph({1: [2]}, ["A", "B"])
        index_from_1 = graph.nodes[1].edges[2]
        index_from_2 = graph.nodes[2].edges[1]
        self.assertEqual(index_from_1, index_from_2)
        self.assertIs(graph.edge_between(1, 2), graph.edge_between(2, 1))

    def test_self_loop_raises(self):
        with self.assertRaises(InvalidTopology):
            Graph({1: [2, 1]}, ["A", "B"])

    def test_edge_rejects_self_loop(self):
        with self.assertRaises(InvalidTopology):
            Edge(3, 3, 2)

    def test_malformed_neighbor_list(self):
        with self.assertRaises(InvalidTopology):
            Graph({1: 2}, ["A", "B"])
        with self.assertRaises(InvalidTopology):
            Graph({1: "23"}, ["A", "B"])

    def test_unhashable_neighbor(self):
        with self.assertRaises(InvalidTopology):
            Graph({1: [[2]]}, ["A", "B"])

    def test_adjacency_must_be_mapping(self):
        with self.assertRaises(InvalidTopology):
            Graph([(1, 2)], ["A", "B"])

    def test_empty_labels(self):
        with self.assertRaises(InvalidArgument):
            Graph({1: [2]}, [])

    def test_invalid_config(self):
        with self.assertRaises(InvalidArgument):
            Graph({1: [2]}, ["A"], config=BPConfig(prior="gaussian"))
        with self.assertRaises(InvalidArgument):
            Graph({1: [2]}, ["A"], config=BPConfig(evidence_floor=0.0))

    def test_random_priors_are_normalized(self):
        graph = Graph({1: [2, 3], 2: [3]}, ["A", "B", "C"], config=BPConfig(seed=7))
        for node_id in graph.node_ids:
            total = sum(graph.get_beliefs(node_id).values())
            self.assertAlmostEqual(total, 1.0, places=9)

    def test_seed_reproduces_random_priors(self):
        config = BPConfig(seed=123)
        first = Graph({1: [2]}, ["A", "B", "C"], config=config)
        second = Graph({1: [2]}, ["A", "B", "C"], config=config)
        for node_id in first.node_ids:
            self.assertTrue(
                torch.equal(first.nodes[node_id].log_prior, second.nodes[node_id].log_prior)
            )

    def test_uniform_prior(self):
        graph = Graph({1: [2]}, ["A", "B", "C", "D"], config=BPConfig(prior="uniform"))
        for value in graph.get_beliefs(1).values():
            self.assertAlmostEqual(value, 0.25, places=12)

    def test_initial_messages_are_uniform(self):
        graph = Graph({1: [2]}, ["A", "B"])
        message = graph.get_message(1, 2)
        self.assertAlmostEqual(message["A"], 0.5, places=12)
        self.assertAlmostEqual(message["B"], 0.5, places=12)

    def test_unknown_node_queries(self):
        graph = Graph({1: [2]}, ["A", "B"])
        with self.assertRaises(NodeNotFound):
            graph.get_beliefs(99)
        with self.assertRaises(KeyError):
            graph.neighbors("missing")
        with self.assertRaises(NodeNotFound):
            graph.get_message(1, 99)

    def test_message_between_non_neighbors(self):
        graph = Graph({1: [2], 3: []}, ["A", "B"])
        with self.assertRaises(InvalidArgument):
            graph.get_message(1, 3)

    def test_repr(self):
        graph = Graph({1: [2, 3]}, ["A", "B"])
        self.assertEqual(repr(graph), "Graph(nodes=3, edges=2, labels=2)")


if __name__ == "__main__":
    unittest.main()
