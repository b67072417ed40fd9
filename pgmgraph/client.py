"""pgmgraph client — the primary interface for building and reading a graph."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from pgmgraph import ingest, probability
from pgmgraph.engine.core import (
    Edge as CoreEdge,
)
from pgmgraph.engine.core import (
    PGMCore,
)
from pgmgraph.engine.core import (
    Vertex as CoreVertex,
)
from pgmgraph.engine.identity import IdentityGenerator
from pgmgraph.models import Edge, GraphStats, ValidationResult, Vertex, VertexReport

# --- Conversion helpers: engine core types <-> pydantic models ---


def _core_vertex_to_model(cv: CoreVertex) -> Vertex:
    return Vertex(
        id=cv.id,
        unique_name=cv.unique_name,
        name=cv.name,
        label=cv.label,
        count=cv.count,
        properties=dict(cv.properties),
        edge_ids=list(cv.edges),
    )


def _core_edge_to_model(ce: CoreEdge) -> Edge:
    return Edge(
        id=ce.id,
        unique_name=ce.unique_name,
        name=ce.name,
        label=ce.label,
        count=ce.count,
        properties=dict(ce.properties),
        vertex_a_id=ce.vertex_a_id,
        vertex_b_id=ce.vertex_b_id,
        directionality=ce.directionality,
    )


class PGM:
    """A probabilistic graph of observed vertices and edges.

    Every call to ``vertex()`` or ``edge()`` is an observation: the first one
    creates the entity, later ones bump its count and replace its
    properties. Probabilities are read back from the counts.

    Example:
        ```python
        pgm = PGM()
        pgm.edge("what", "is")
        pgm.edge("what", "is")
        pgm.vertex_probability("what")      # 2 observations / 2 vertices
        pgm.transition_probability("what_is")
        ```

    Each instance owns its own graph; instances never share state.
    """

    def __init__(
        self,
        *,
        id_generator: IdentityGenerator | None = None,
        separator: str = ingest.DEFAULT_SEPARATOR,
    ) -> None:
        self._core = PGMCore(id_generator)
        self._separator = separator

    @property
    def core(self) -> PGMCore:
        """The underlying engine, for callers that need the raw records."""
        return self._core

    # --- Observations ---

    def vertex(
        self,
        unique_name: str,
        *,
        name: str = "",
        label: str = "",
        properties: dict[str, Any] | None = None,
        **extra_properties: Any,
    ) -> Vertex:
        """Observe a vertex.

        Properties replace the stored ones on repeat observations.

        Args:
            unique_name: Deduplication key.
            name: Display name, kept from the first observation.
            label: Label, kept from the first observation.
            properties: Property dict. Use this for keys that collide with
                the keyword arguments (``unique_name``, ``name``, ``label``,
                ``properties``).
            **extra_properties: Further properties; they win over ``properties``.

        Returns:
            Snapshot of the canonical vertex.
        """
        merged = dict(properties or {})
        merged.update(extra_properties)
        cv = self._core.upsert_vertex(
            CoreVertex(unique_name, name=name, label=label, properties=merged)
        )
        return _core_vertex_to_model(cv)

    def edge(
        self,
        a: str,
        b: str,
        *,
        unique_name: str | None = None,
        directionality: str = ingest.DEFAULT_DIRECTIONALITY,
        label: str = "",
        properties: dict[str, Any] | None = None,
        link: bool = True,
    ) -> Edge:
        """Observe ``a`` followed by ``b``.

        Both endpoint vertices are observed too, then the edge.

        Args:
            a: Unique name of the source vertex.
            b: Unique name of the target vertex.
            unique_name: Edge deduplication key. Defaults to ``"a_b"``.
            directionality: Free-form direction tag, kept from the first observation.
            label: Edge label, kept from the first observation.
            properties: Edge properties.
            link: Link the edge into both endpoints' adjacency.

        Returns:
            Snapshot of the canonical edge.
        """
        with self._core.batch():
            va = self._core.upsert_vertex(CoreVertex(a))
            vb = self._core.upsert_vertex(CoreVertex(b))
            ce = self._core.upsert_edge(
                CoreEdge(
                    unique_name or ingest.edge_name(a, b, self._separator),
                    label=label,
                    properties=dict(properties or {}),
                    vertex_a_id=va.id,
                    vertex_b_id=vb.id,
                    directionality=directionality,
                )
            )
            if link:
                self._core.link_edge(ce)
            return _core_edge_to_model(ce)

    def observe(self, tokens: Sequence[str] | str, *, stride: int = 2) -> int:
        """Observe the word pairs of one sentence.

        Returns:
            Number of pairs observed.
        """
        if isinstance(tokens, str):
            tokens = ingest.tokenize(tokens)
        return ingest.ingest_sentence(self._core, tokens, stride=stride, separator=self._separator)

    def observe_all(
        self, sentences: Iterable[Sequence[str] | str], *, stride: int = 2, workers: int = 1
    ) -> int:
        """Observe a whole corpus, optionally with worker threads."""
        return ingest.ingest_corpus(
            self._core, sentences, workers=workers, stride=stride, separator=self._separator
        )

    # --- Lookups ---

    def get_vertex(self, unique_name: str) -> Vertex | None:
        cv = self._core.get_vertex(unique_name)
        return _core_vertex_to_model(cv) if cv is not None else None

    def get_edge(self, unique_name: str) -> Edge | None:
        ce = self._core.get_edge(unique_name)
        return _core_edge_to_model(ce) if ce is not None else None

    def vertices(self) -> list[Vertex]:
        return [_core_vertex_to_model(v) for v in self._core.get_all_vertices()]

    def edges(self, *, touching: str | None = None) -> list[Edge]:
        """All edges, or only those linked into the vertex named ``touching``."""
        if touching is None:
            return [_core_edge_to_model(e) for e in self._core.get_all_edges()]
        cv = self._core.get_vertex(touching)
        if cv is None:
            return []
        return [_core_edge_to_model(e) for e in cv.incident_edges()]

    # --- Probabilities ---

    def vertex_probability(self, unique_name: str) -> float:
        return probability.vertex_probability(self._core, unique_name)

    def edge_probability(self, unique_name: str) -> float:
        return probability.edge_probability(self._core, unique_name)

    def transition_probability(self, edge_unique_name: str) -> float:
        return probability.transition_probability(self._core, edge_unique_name)

    def report(self, unique_name: str) -> VertexReport | None:
        return probability.vertex_report(self._core, unique_name)

    # --- Statistics & Validation ---

    def stats(self) -> GraphStats:
        s = self._core.stats()
        return GraphStats(
            vertex_count=s["num_vertices"],
            edge_count=s["num_edges"],
            total_vertex_count=s["total_vertex_count"],
            total_edge_count=s["total_edge_count"],
            total_entity_count=s["total_entity_count"],
        )

    def validate(self) -> ValidationResult:
        result = self._core.validate()
        return ValidationResult(
            valid=result["valid"],
            errors=result["errors"],
            warnings=result["warnings"],
        )

    def __repr__(self) -> str:
        s = self._core.stats()
        return f"PGM(vertices={s['num_vertices']}, edges={s['num_edges']})"
