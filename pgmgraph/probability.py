"""Empirical probabilities from observation counts.

Reads only: call these after the upserts you care about have completed.
Per-entity counts are normalized by the graph's running totals, which count
distinct unique names, so a vertex seen more often than there are distinct
vertices can score above 1.0. Transition probabilities are normalized over
the edges touching the source vertex and always lie in [0, 1].
"""

from __future__ import annotations

from pgmgraph.engine.core import Edge, PGMCore
from pgmgraph.models import EdgeReport, VertexReport


class EmptyGraphError(ValueError):
    """Raised when a probability would divide by an empty total."""


def vertex_probability(core: PGMCore, unique_name: str) -> float:
    """Count of the vertex over the number of distinct vertices.

    Unknown vertices score 0.0.

    Raises:
        EmptyGraphError: If no vertex has been upserted yet
    """
    if core.total_vertex_count == 0:
        raise EmptyGraphError("No vertices have been observed yet")
    vertex = core.get_vertex(unique_name)
    if vertex is None:
        return 0.0
    return vertex.count / core.total_vertex_count


def edge_probability(core: PGMCore, unique_name: str) -> float:
    """Count of the edge over the number of distinct edges.

    Raises:
        EmptyGraphError: If no edge has been upserted yet
    """
    if core.total_edge_count == 0:
        raise EmptyGraphError("No edges have been observed yet")
    edge = core.get_edge(unique_name)
    if edge is None:
        return 0.0
    return edge.count / core.total_edge_count


def _transition(core: PGMCore, edge: Edge) -> float:
    source, found = core.get_vertex_by_id(edge.vertex_a_id)
    if not found:
        return 0.0
    if edge.id not in source.edges:
        # Not linked into its source yet, so it has no share of the source mass
        return 0.0
    edge_sum = sum(e.count for e in source.incident_edges())
    return edge.count / edge_sum


def transition_probability(core: PGMCore, edge_unique_name: str) -> float:
    """Probability that the edge's target follows its source.

    The edge count is divided by the summed counts of every edge linked
    into the source vertex. Unknown edges, and edges not linked into their
    source vertex, score 0.0.
    """
    edge = core.get_edge(edge_unique_name)
    if edge is None:
        return 0.0
    return _transition(core, edge)


def vertex_report(core: PGMCore, unique_name: str) -> VertexReport | None:
    """Probability of a vertex and of every edge linked into it.

    Returns:
        The report, or None if the vertex was never upserted

    Raises:
        EmptyGraphError: If the graph holds no vertices
    """
    probability = vertex_probability(core, unique_name)
    vertex = core.get_vertex(unique_name)
    if vertex is None:
        return None

    edge_reports = []
    for edge in sorted(vertex.incident_edges(), key=lambda e: e.unique_name):
        source, _ = core.get_vertex_by_id(edge.vertex_a_id)
        target, _ = core.get_vertex_by_id(edge.vertex_b_id)
        edge_reports.append(
            EdgeReport(
                unique_name=edge.unique_name,
                source=source.unique_name if source else edge.vertex_a_id,
                target=target.unique_name if target else edge.vertex_b_id,
                count=edge.count,
                global_probability=edge.count / core.total_edge_count,
                transition_probability=_transition(core, edge),
            )
        )

    return VertexReport(
        unique_name=vertex.unique_name,
        count=vertex.count,
        probability=probability,
        edges=edge_reports,
    )
