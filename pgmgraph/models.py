"""Pydantic models for the pgmgraph public API.

These are read-only snapshots of the core engine records (engine.core) plus
the probability report types, providing validation and JSON serialization
for the client-facing API and the CLI.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator


class Vertex(BaseModel):
    """A deduplicated vertex and how often it has been observed.

    ``edge_ids`` lists the edges linked into the vertex's adjacency.
    """

    id: str
    unique_name: str
    name: str = ""
    label: str = ""
    count: float = Field(default=1.0, ge=1.0)
    properties: dict[str, Any] = Field(default_factory=dict)
    edge_ids: list[str] = Field(default_factory=list)

    def __repr__(self) -> str:
        return f"Vertex({self.unique_name!r}, count={self.count})"


class Edge(BaseModel):
    """A deduplicated edge between two vertices, referenced by identity."""

    id: str
    unique_name: str
    name: str = ""
    label: str = ""
    count: float = Field(default=1.0, ge=1.0)
    properties: dict[str, Any] = Field(default_factory=dict)
    vertex_a_id: str
    vertex_b_id: str
    directionality: str = "directed"

    def __repr__(self) -> str:
        return (
            f"Edge({self.unique_name!r}: {self.vertex_a_id} -> {self.vertex_b_id}, "
            f"count={self.count})"
        )


class GraphStats(BaseModel):
    """Stored entity counts and the running totals used for normalization."""

    vertex_count: int
    edge_count: int
    total_vertex_count: float
    total_edge_count: float
    total_entity_count: float

    @model_validator(mode="after")
    def _check_entity_total(self) -> GraphStats:
        if self.total_entity_count != self.total_vertex_count + self.total_edge_count:
            raise ValueError("total_entity_count must equal vertex total plus edge total")
        return self


class ValidationResult(BaseModel):
    """Result of a graph consistency check.

    Contains a pass/fail flag, a list of errors, and a list of warnings
    found during validation.
    """

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class EdgeReport(BaseModel):
    """Probabilities for one edge leaving a reported vertex.

    ``global_probability`` is the edge's count over the number of distinct edges;
    ``transition_probability`` is the chance that ``target`` follows
    ``source`` among the edges touching ``source``.
    """

    unique_name: str
    source: str
    target: str
    count: float
    global_probability: float = Field(ge=0.0)
    transition_probability: float = Field(ge=0.0, le=1.0)


class VertexReport(BaseModel):
    """Probability of a vertex plus a breakdown of its incident edges."""

    unique_name: str
    count: float
    probability: float = Field(ge=0.0)
    edges: list[EdgeReport] = Field(default_factory=list)
