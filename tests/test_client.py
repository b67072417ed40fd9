"""Tests for the pgmgraph client API."""

import pydantic
import pytest

from pgmgraph import PGM, EmptyGraphError, GraphStats
from pgmgraph.engine import SequentialIdentityGenerator
from pgmgraph.ingest import DEMO_SENTENCES


class TestVertices:
    def test_create_vertex(self, pgm):
        v = pgm.vertex("what", label="word", pos="pronoun")
        assert v.id == "id-1"
        assert v.count == 1.0
        assert v.label == "word"
        assert v.properties == {"pos": "pronoun"}

    def test_repeat_observation(self, pgm):
        pgm.vertex("what", x=0, y=2)
        v = pgm.vertex("what", x=1)
        assert v.id == "id-1"
        assert v.count == 2.0
        assert v.properties == {"x": 1}

    def test_get_vertex(self, pgm):
        pgm.vertex("what")
        assert pgm.get_vertex("what").unique_name == "what"
        assert pgm.get_vertex("nope") is None

    def test_reserved_property_names_via_dict(self, pgm):
        v = pgm.vertex("what", properties={"name": "pronoun", "unique_name": "x"}, pos="det")
        assert v.unique_name == "what"
        assert v.name == ""
        assert v.properties == {"name": "pronoun", "unique_name": "x", "pos": "det"}

    def test_keyword_properties_win_over_dict(self, pgm):
        v = pgm.vertex("what", properties={"x": 0}, x=1)
        assert v.properties == {"x": 1}

    def test_snapshot_is_detached(self, pgm):
        v = pgm.vertex("what", x=1)
        v.properties["x"] = 99
        assert pgm.get_vertex("what").properties == {"x": 1}


class TestEdges:
    def test_edge_observes_endpoints(self, pgm):
        e = pgm.edge("what", "is")
        assert e.unique_name == "what_is"
        assert e.vertex_a_id == pgm.get_vertex("what").id
        assert e.vertex_b_id == pgm.get_vertex("is").id
        assert pgm.get_vertex("what").edge_ids == [e.id]
        assert pgm.get_vertex("is").edge_ids == [e.id]

    def test_edge_without_link(self, pgm):
        pgm.edge("what", "is", link=False)
        assert pgm.get_vertex("what").edge_ids == []

    def test_custom_unique_name_and_properties(self, pgm):
        e = pgm.edge("a", "b", unique_name="ab", properties={"w": 1}, directionality="undirected")
        assert e.unique_name == "ab"
        assert e.properties == {"w": 1}
        assert e.directionality == "undirected"
        assert pgm.get_edge("a_b") is None

    def test_custom_separator(self):
        pgm = PGM(separator="->")
        e = pgm.edge("a", "b")
        assert e.unique_name == "a->b"

    def test_edges_touching(self, pgm):
        pgm.edge("what", "is")
        pgm.edge("what", "do")
        pgm.edge("on", "the")
        assert sorted(e.unique_name for e in pgm.edges(touching="what")) == ["what_do", "what_is"]
        assert len(pgm.edges()) == 3
        assert pgm.edges(touching="zebra") == []

    def test_vertices(self, pgm):
        pgm.edge("what", "is")
        assert {v.unique_name for v in pgm.vertices()} == {"what", "is"}


class TestObserve:
    def test_observe_string(self, pgm):
        assert pgm.observe("What is thought, Eric Baum?") == 2
        assert pgm.get_edge("thought_eric") is not None

    def test_observe_all_threaded(self, pgm):
        pgm.observe_all(DEMO_SENTENCES, workers=4)
        assert pgm.get_vertex("what").count == 4.0
        assert pgm.validate().valid


class TestProbabilities:
    @pytest.fixture()
    def demo_pgm(self):
        pgm = PGM(id_generator=SequentialIdentityGenerator())
        pgm.observe_all(DEMO_SENTENCES)
        return pgm

    def test_probabilities(self, demo_pgm):
        assert demo_pgm.vertex_probability("what") == pytest.approx(4 / 19)
        assert demo_pgm.edge_probability("what_is") == pytest.approx(0.25)
        assert demo_pgm.transition_probability("what_is") == pytest.approx(0.75)

    def test_report(self, demo_pgm):
        report = demo_pgm.report("what")
        assert report.count == 4.0
        assert len(report.edges) == 2
        assert demo_pgm.report("zebra") is None

    def test_empty(self, pgm):
        with pytest.raises(EmptyGraphError):
            pgm.vertex_probability("what")


class TestStatsAndValidation:
    def test_stats(self, pgm):
        pgm.edge("what", "is")
        pgm.edge("what", "is")
        stats = pgm.stats()
        assert stats.vertex_count == 2
        assert stats.edge_count == 1
        assert stats.total_entity_count == 3.0

    def test_stats_model_rejects_inconsistent_totals(self):
        with pytest.raises(pydantic.ValidationError):
            GraphStats(
                vertex_count=1,
                edge_count=1,
                total_vertex_count=1.0,
                total_edge_count=1.0,
                total_entity_count=5.0,
            )

    def test_validate(self, pgm):
        pgm.edge("what", "is")
        result = pgm.validate()
        assert result.valid
        assert result.errors == []

    def test_validate_reports_dangling_edges_as_warnings(self, pgm):
        from pgmgraph.engine import Edge

        pgm.core.upsert_edge(Edge("ghost", vertex_a_id="x", vertex_b_id="y"))
        result = pgm.validate()
        assert result.valid
        assert len(result.warnings) == 1

    def test_repr(self, pgm):
        pgm.edge("a", "b")
        assert repr(pgm) == "PGM(vertices=2, edges=1)"


def test_instances_are_independent():
    first, second = PGM(), PGM()
    first.vertex("what")
    assert second.get_vertex("what") is None
