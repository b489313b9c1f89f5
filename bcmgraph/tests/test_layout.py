"""Tests for the layered auto-layout."""

from bcmgraph.engine.layout import (
    NODE_HEIGHT,
    NODE_SEP,
    NODE_WIDTH,
    RANK_SEP,
    assign_ranks,
    layered_layout,
)
from bcmgraph.models.diagram import Position


class TestRanks:
    def test_longest_path(self):
        ranks = assign_ranks(["a", "b", "c"], [("a", "b"), ("b", "c"), ("a", "c")])
        assert ranks == {"a": 0, "b": 1, "c": 2}

    def test_cycle_is_broken(self):
        ranks = assign_ranks(["a", "b"], [("a", "b"), ("b", "a")])
        assert ranks == {"a": 0, "b": 1}

    def test_self_loop_ignored(self):
        assert assign_ranks(["a"], [("a", "a")]) == {"a": 0}


class TestLayeredLayout:
    def test_empty(self):
        assert layered_layout([], []) == {}

    def test_chain_top_to_bottom(self):
        positions = layered_layout(["a", "b", "c"], [("a", "b"), ("b", "c")])
        step = NODE_HEIGHT + RANK_SEP
        assert positions == {
            "a": Position(x=0, y=0),
            "b": Position(x=0, y=step),
            "c": Position(x=0, y=2 * step),
        }

    def test_chain_left_to_right(self):
        positions = layered_layout(["a", "b"], [("a", "b")], direction="LR")
        assert positions["a"] == Position(x=0, y=0)
        assert positions["b"] == Position(x=NODE_WIDTH + RANK_SEP, y=0)

    def test_ranks_are_centred(self):
        """A diamond: the single-node ranks sit in the middle of the wide one."""
        positions = layered_layout(
            ["a", "b", "c", "d"],
            [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")],
        )
        wide = 2 * NODE_WIDTH + NODE_SEP
        centred = (wide - NODE_WIDTH) / 2
        assert positions["a"].x == centred
        assert positions["d"].x == centred
        assert {positions["b"].x, positions["c"].x} == {0, NODE_WIDTH + NODE_SEP}
        assert positions["b"].y == positions["c"].y

    def test_every_node_placed_without_overlap(self):
        node_ids = [f"n{i}" for i in range(7)]
        edges = [("n0", "n1"), ("n0", "n2"), ("n2", "n3"), ("n3", "n0"), ("n4", "n5")]
        positions = layered_layout(node_ids, edges)
        assert set(positions) == set(node_ids)
        corners = {(p.x, p.y) for p in positions.values()}
        assert len(corners) == len(node_ids)

    def test_edges_to_unknown_nodes_ignored(self):
        positions = layered_layout(["a"], [("a", "ghost")])
        assert positions == {"a": Position(x=0, y=0)}
