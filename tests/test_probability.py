"""Tests for empirical probability calculations."""

import pytest

from pgmgraph.engine import Edge, PGMCore, Vertex
from pgmgraph.probability import (
    EmptyGraphError,
    edge_probability,
    transition_probability,
    vertex_probability,
    vertex_report,
)


class TestVertexProbability:
    def test_count_over_distinct_vertices(self, demo_core):
        assert vertex_probability(demo_core, "what") == pytest.approx(4 / 19)
        assert vertex_probability(demo_core, "is") == pytest.approx(3 / 19)

    def test_unknown_vertex_is_zero(self, demo_core):
        assert vertex_probability(demo_core, "zebra") == 0.0

    def test_empty_graph_raises(self, core):
        with pytest.raises(EmptyGraphError, match="No vertices"):
            vertex_probability(core, "what")

    def test_empty_graph_error_is_value_error(self):
        assert issubclass(EmptyGraphError, ValueError)

    def test_can_exceed_one(self, core):
        for _ in range(3):
            core.upsert_vertex(Vertex("only"))
        assert vertex_probability(core, "only") == 3.0


class TestEdgeProbability:
    def test_count_over_distinct_edges(self, demo_core):
        assert edge_probability(demo_core, "what_is") == pytest.approx(3 / 12)
        assert edge_probability(demo_core, "what_do") == pytest.approx(1 / 12)

    def test_unknown_edge_is_zero(self, demo_core):
        assert edge_probability(demo_core, "is_what") == 0.0

    def test_vertices_only_raises(self, core):
        core.upsert_vertex(Vertex("what"))
        with pytest.raises(EmptyGraphError, match="No edges"):
            edge_probability(core, "what_is")


class TestTransitionProbability:
    def test_normalized_over_source_edges(self, demo_core):
        assert transition_probability(demo_core, "what_is") == pytest.approx(0.75)
        assert transition_probability(demo_core, "what_do") == pytest.approx(0.25)

    def test_incoming_edges_share_the_source_mass(self, demo_core):
        # "the" is the target of on_the and the source of the_meaning
        assert transition_probability(demo_core, "the_meaning") == pytest.approx(0.5)
        assert transition_probability(demo_core, "on_the") == pytest.approx(1.0)

    def test_unknown_edge_is_zero(self, demo_core):
        assert transition_probability(demo_core, "nope") == 0.0

    def test_unlinked_edge_is_zero(self, core):
        a = core.upsert_vertex(Vertex("a"))
        b = core.upsert_vertex(Vertex("b"))
        core.upsert_edge(Edge("a_b", vertex_a_id=a.id, vertex_b_id=b.id))
        assert transition_probability(core, "a_b") == 0.0

    def test_edge_linked_only_into_target_is_zero(self, core):
        a = core.upsert_vertex(Vertex("a"))
        b = core.upsert_vertex(Vertex("b"))
        c = core.upsert_vertex(Vertex("c"))
        a_c = core.upsert_edge(Edge("a_c", vertex_a_id=a.id, vertex_b_id=c.id))
        a.upsert_edge(a_c)
        core.upsert_edge(Edge("a_b", vertex_a_id=a.id, vertex_b_id=b.id))
        a_b = core.upsert_edge(Edge("a_b", vertex_a_id=a.id, vertex_b_id=b.id))
        b.upsert_edge(a_b)

        assert transition_probability(core, "a_b") == 0.0
        report = vertex_report(core, "b")
        assert [e.unique_name for e in report.edges] == ["a_b"]
        assert report.edges[0].transition_probability == 0.0

    def test_dangling_source_is_zero(self, core):
        core.upsert_edge(Edge("x_y", vertex_a_id="x", vertex_b_id="y"))
        assert transition_probability(core, "x_y") == 0.0


class TestVertexReport:
    def test_report_for_what(self, demo_core):
        report = vertex_report(demo_core, "what")
        assert report.unique_name == "what"
        assert report.count == 4.0
        assert report.probability == pytest.approx(4 / 19)
        assert [e.unique_name for e in report.edges] == ["what_do", "what_is"]

        what_is = report.edges[1]
        assert what_is.source == "what"
        assert what_is.target == "is"
        assert what_is.count == 3.0
        assert what_is.global_probability == pytest.approx(0.25)
        assert what_is.transition_probability == pytest.approx(0.75)

    def test_transitions_of_outgoing_edges_sum_to_one(self, demo_core):
        report = vertex_report(demo_core, "what")
        assert sum(e.transition_probability for e in report.edges) == pytest.approx(1.0)

    def test_unknown_vertex(self, demo_core):
        assert vertex_report(demo_core, "zebra") is None

    def test_empty_graph_raises(self):
        with pytest.raises(EmptyGraphError):
            vertex_report(PGMCore(), "what")
