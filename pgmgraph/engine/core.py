"""Core probabilistic graph data structures and the upsert/dedup engine.

Vertices and edges are deduplicated by a caller-supplied unique name. Every
upsert either registers a brand-new entity (assigning identity and starting
its counter at 1.0) or resolves to the existing entity, merges the newly
observed properties and bumps its counter. Per-entity counts divided by the
graph-wide totals give empirical probabilities.

Thread Safety:
    All upserts and lookups on PGMCore are protected by a single internal
    RLock guarding both stores, both unique-name indexes and the aggregate
    totals. Vertex upserts and edge upserts serialize against each other.

    Vertex.upsert_edge() mutates a single vertex's adjacency and is NOT
    guarded by the graph lock. Use PGMCore.link_edge() when several threads
    may link edges into the same vertex.

    For several operations that must appear atomic, use batch():
        with graph.batch():
            a = graph.upsert_vertex(Vertex("what"))
            b = graph.upsert_vertex(Vertex("is"))
            graph.upsert_edge(Edge("what_is", vertex_a_id=a.id, vertex_b_id=b.id))

Cross references use identities rather than objects: an edge stores the ids
of its endpoints, and vertices resolve through the graph's vertex store.
"""

import copy
import logging
import threading
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from .identity import IdentityGenerator, UUIDIdentityGenerator

logger = logging.getLogger(__name__)


@dataclass
class Entity:
    """Identity, counter and property bag shared by vertices and edges.

    Attributes:
        unique_name: Deduplication key; must not change after creation
        name: Free-form display name
        label: Free-form classification label
        properties: Opaque key-value metadata
        id: Generated identity, empty until the entity is first upserted
        count: Number of upserts that resolved to this entity

    Raises:
        TypeError: If unique_name, name or label is not a string
    """

    unique_name: str
    name: str = ""
    label: str = ""
    properties: dict[str, Any] = field(default_factory=dict)
    id: str = ""
    count: float = 0.0

    def __post_init__(self) -> None:
        for attr in ("unique_name", "name", "label"):
            value = getattr(self, attr)
            if not isinstance(value, str):
                raise TypeError(
                    f"{type(self).__name__} {attr} must be a string, got: {type(value).__name__}"
                )

    def increment(self) -> None:
        self.count += 1.0

    def update_properties(
        self,
        new_props: dict[str, Any],
        overwrite_props: dict[str, Any],
    ) -> None:
        """Merge newly observed properties and record one more observation.

        Keys from new_props that are not yet present are added, then keys
        from overwrite_props that are present are overwritten. The bag is
        finally replaced wholesale by new_props, so after the call the
        properties equal new_props exactly. The counter always goes up by 1.0.
        """
        for key, value in new_props.items():
            if key not in self.properties:
                self.properties[key] = value

        for key, value in overwrite_props.items():
            if key in self.properties:
                self.properties[key] = value

        # Last write wins over both passes above
        self.properties = dict(new_props)
        self.increment()


@dataclass
class Edge(Entity):
    """A connection between two vertices.

    Attributes:
        vertex_a_id: Identity of the source endpoint
        vertex_b_id: Identity of the target endpoint
        directionality: Free-form tag, e.g. "directed" or "undirected"
    """

    vertex_a_id: str = ""
    vertex_b_id: str = ""
    directionality: str = "directed"

    @property
    def endpoint_ids(self) -> tuple[str, str]:
        return (self.vertex_a_id, self.vertex_b_id)


@dataclass
class Vertex(Entity):
    """A named entity plus the edges touching it.

    The adjacency maps edge identity to the Edge record held by the graph's
    edge store; the vertex does not own those edges.
    """

    edges: dict[str, Edge] = field(default_factory=dict)

    def upsert_edge(self, edge: Edge) -> bool:
        """Link an edge into this vertex's adjacency.

        Pure set insert keyed on edge.id: no counters change.

        Returns:
            True if the edge was newly linked, False if already present
        """
        if edge.id in self.edges:
            return False
        self.edges[edge.id] = edge
        return True

    def incident_edges(self) -> list[Edge]:
        return list(self.edges.values())


class PGMCore:
    """Deduplicated vertex/edge store with aggregate occurrence totals.

    Design principles:
    - One identity per unique name for the lifetime of the graph
    - Store and unique-name index always consistent
    - Totals only move on first creation, never on merge
    - Explicit handle: no module-level graph instance
    """

    def __init__(self, id_generator: IdentityGenerator | None = None) -> None:
        self._id_generator: IdentityGenerator = id_generator or UUIDIdentityGenerator()
        self._vertices: dict[str, Vertex] = {}
        self._edges: dict[str, Edge] = {}
        # Dedup indexes: unique name -> identity
        self._unique_vertex_names: dict[str, str] = {}
        self._unique_edge_names: dict[str, str] = {}
        self.total_vertex_count = 0.0
        self.total_edge_count = 0.0
        self.total_entity_count = 0.0
        # Reentrant so batch() can wrap the public operations
        self._lock = threading.RLock()

    def __getstate__(self) -> dict[str, Any]:
        """Support for pickle - exclude the lock."""
        state = self.__dict__.copy()
        del state["_lock"]
        return state

    def __setstate__(self, state: dict[str, Any]) -> None:
        """Support for pickle - recreate the lock."""
        self.__dict__.update(state)
        self._lock = threading.RLock()

    def __deepcopy__(self, memo: dict) -> "PGMCore":
        """Copy all records under the lock.

        The identity generator is shared rather than copied so identities
        stay unique across the original and the copy.
        """
        with self._lock:
            new_core = PGMCore.__new__(PGMCore)
            memo[id(self)] = new_core

            new_core._id_generator = self._id_generator
            new_core._vertices = copy.deepcopy(self._vertices, memo)
            new_core._edges = copy.deepcopy(self._edges, memo)
            new_core._unique_vertex_names = dict(self._unique_vertex_names)
            new_core._unique_edge_names = dict(self._unique_edge_names)
            new_core.total_vertex_count = self.total_vertex_count
            new_core.total_edge_count = self.total_edge_count
            new_core.total_entity_count = self.total_entity_count
            new_core._lock = threading.RLock()

            return new_core

    # ========== Thread Safety ==========

    @contextmanager
    def batch(self) -> Generator[None, None, None]:
        """Hold the lock for multiple operations - provides isolation, NOT rollback.

        Other threads see either none or all of the upserts made inside the
        block. If an exception occurs mid-batch, earlier upserts persist.
        """
        with self._lock:
            yield

    # ========== Upserts ==========

    def upsert_vertex(self, candidate: Vertex) -> Vertex:
        """Register a new vertex or merge into the existing one.

        The candidate only needs a unique name and optional properties; id,
        count and adjacency are assigned here on creation.

        Returns:
            The canonical vertex: the stored one on a hit, the candidate
            itself on a miss
        """
        with self._lock:
            vertex_id = self._unique_vertex_names.get(candidate.unique_name)
            if vertex_id is not None:
                existing = self._vertices[vertex_id]
                existing.update_properties(candidate.properties, {})
                return existing

            candidate.id = self._id_generator.new_id()
            candidate.count = 1.0
            candidate.edges = {}
            self._vertices[candidate.id] = candidate
            self._unique_vertex_names[candidate.unique_name] = candidate.id
            self.total_vertex_count += 1.0
            self.total_entity_count += 1.0
            logger.debug("Created vertex %r as %s", candidate.unique_name, candidate.id)
            return candidate

    def upsert_edge(self, candidate: Edge) -> Edge:
        """Register a new edge or merge into the existing one.

        A new edge keeps the endpoint ids and directionality it was built
        with. Endpoints are not checked against the vertex store, and on a
        hit the candidate's endpoints are ignored.

        Returns:
            The canonical edge
        """
        with self._lock:
            edge_id = self._unique_edge_names.get(candidate.unique_name)
            if edge_id is not None:
                existing = self._edges[edge_id]
                existing.update_properties(candidate.properties, {})
                return existing

            candidate.id = self._id_generator.new_id()
            candidate.count = 1.0
            self._edges[candidate.id] = candidate
            self._unique_edge_names[candidate.unique_name] = candidate.id
            self.total_edge_count += 1.0
            self.total_entity_count += 1.0
            logger.debug(
                "Created edge %r as %s (%s -> %s)",
                candidate.unique_name,
                candidate.id,
                candidate.vertex_a_id,
                candidate.vertex_b_id,
            )
            return candidate

    def link_edge(self, edge: Edge) -> tuple[bool, bool]:
        """Link an edge into the adjacency of both of its endpoints.

        Runs under the graph lock, so concurrent linking into the same vertex
        is safe. Endpoints missing from the vertex store are skipped.

        Returns:
            (linked into vertex A, linked into vertex B); False where the
            edge was already linked or the endpoint is missing
        """
        with self._lock:
            linked = []
            for vertex_id in edge.endpoint_ids:
                vertex = self._vertices.get(vertex_id)
                linked.append(vertex.upsert_edge(edge) if vertex is not None else False)
            return (linked[0], linked[1])

    # ========== Lookups ==========

    def get_vertex_by_id(self, vertex_id: str) -> tuple[Vertex | None, bool]:
        """Get a vertex by identity, with a found flag."""
        with self._lock:
            vertex = self._vertices.get(vertex_id)
            return vertex, vertex is not None

    def get_edge_by_id(self, edge_id: str) -> tuple[Edge | None, bool]:
        """Get an edge by identity, with a found flag."""
        with self._lock:
            edge = self._edges.get(edge_id)
            return edge, edge is not None

    def get_vertex(self, unique_name: str) -> Vertex | None:
        """Get a vertex by unique name, or None if never upserted."""
        with self._lock:
            vertex_id = self._unique_vertex_names.get(unique_name)
            return self._vertices[vertex_id] if vertex_id is not None else None

    def get_edge(self, unique_name: str) -> Edge | None:
        """Get an edge by unique name, or None if never upserted."""
        with self._lock:
            edge_id = self._unique_edge_names.get(unique_name)
            return self._edges[edge_id] if edge_id is not None else None

    @property
    def unique_vertex_names(self) -> dict[str, str]:
        """Snapshot of the vertex unique-name -> identity index."""
        with self._lock:
            return dict(self._unique_vertex_names)

    @property
    def unique_edge_names(self) -> dict[str, str]:
        """Snapshot of the edge unique-name -> identity index."""
        with self._lock:
            return dict(self._unique_edge_names)

    def get_all_vertices(self) -> list[Vertex]:
        with self._lock:
            return list(self._vertices.values())

    def get_all_edges(self) -> list[Edge]:
        with self._lock:
            return list(self._edges.values())

    # ========== Statistics & Validation ==========

    def stats(self) -> dict[str, Any]:
        """Get graph statistics.

        Returns:
            Dict with num_vertices, num_edges and the three running totals
        """
        with self._lock:
            return {
                "num_vertices": len(self._vertices),
                "num_edges": len(self._edges),
                "total_vertex_count": self.total_vertex_count,
                "total_edge_count": self.total_edge_count,
                "total_entity_count": self.total_entity_count,
            }

    def validate(self) -> dict[str, Any]:
        """Check store/index consistency and report caller-contract violations.

        Errors (graph is invalid):
        - Unique-name index entries pointing at missing or renamed entities
        - Stored entities missing from their unique-name index
        - Totals out of step with the stores
        - Entities with count below 1.0
        - Adjacency entries for edges not in the store or not incident

        Warnings (accepted, but probably a caller bug):
        - Edges whose endpoints are not in the vertex store
        - Entities with an empty unique name

        Returns:
            Dict with 'valid' (bool), 'errors', 'warnings' and
            'dangling_edges' (ids of edges with missing endpoints)
        """
        with self._lock:
            errors: list[str] = []
            warnings: list[str] = []
            dangling_edges: list[str] = []

            for kind, index, store in (
                ("vertex", self._unique_vertex_names, self._vertices),
                ("edge", self._unique_edge_names, self._edges),
            ):
                for unique_name, entity_id in index.items():
                    entity = store.get(entity_id)
                    if entity is None:
                        errors.append(
                            f"Unique {kind} name '{unique_name}' maps to "
                            f"non-existent {kind}: '{entity_id}'"
                        )
                    elif entity.unique_name != unique_name:
                        errors.append(
                            f"Unique {kind} name '{unique_name}' maps to {kind} "
                            f"'{entity_id}' named '{entity.unique_name}'"
                        )
                for entity_id, entity in store.items():
                    if index.get(entity.unique_name) != entity_id:
                        errors.append(f"{kind.capitalize()} '{entity_id}' is not indexed by name")
                    if entity.count < 1.0:
                        errors.append(
                            f"{kind.capitalize()} '{entity_id}' has count {entity.count} < 1.0"
                        )
                    if entity.unique_name == "":
                        warnings.append(f"{kind.capitalize()} '{entity_id}' has an empty unique name")

            if self.total_vertex_count != len(self._vertices):
                errors.append(
                    f"total_vertex_count {self.total_vertex_count} != "
                    f"{len(self._vertices)} stored vertices"
                )
            if self.total_edge_count != len(self._edges):
                errors.append(
                    f"total_edge_count {self.total_edge_count} != {len(self._edges)} stored edges"
                )
            if self.total_entity_count != self.total_vertex_count + self.total_edge_count:
                errors.append(
                    f"total_entity_count {self.total_entity_count} != "
                    f"total_vertex_count + total_edge_count"
                )

            for edge_id, edge in self._edges.items():
                missing = [vid for vid in edge.endpoint_ids if vid not in self._vertices]
                if missing:
                    dangling_edges.append(edge_id)
                    warnings.append(f"Edge '{edge_id}' references non-existent vertices: {missing}")

            for vertex_id, vertex in self._vertices.items():
                for edge_id in vertex.edges:
                    edge = self._edges.get(edge_id)
                    if edge is None:
                        errors.append(
                            f"Adjacency of vertex '{vertex_id}' references "
                            f"non-existent edge: '{edge_id}'"
                        )
                    elif vertex_id not in edge.endpoint_ids:
                        errors.append(
                            f"Adjacency of vertex '{vertex_id}' holds edge '{edge_id}' "
                            f"which does not touch it"
                        )

            return {
                "valid": len(errors) == 0,
                "errors": errors,
                "warnings": warnings,
                "dangling_edges": dangling_edges,
            }

    # ========== Serialization ==========

    def to_dict(self) -> dict[str, Any]:
        """Export to simple dict (for debugging and JSON output)."""
        with self._lock:
            return {
                "vertices": [
                    {
                        "id": v.id,
                        "unique_name": v.unique_name,
                        "name": v.name,
                        "label": v.label,
                        "count": v.count,
                        "properties": dict(v.properties),
                        "edge_ids": sorted(v.edges),
                    }
                    for v in self._vertices.values()
                ],
                "edges": [
                    {
                        "id": e.id,
                        "unique_name": e.unique_name,
                        "name": e.name,
                        "label": e.label,
                        "count": e.count,
                        "properties": dict(e.properties),
                        "vertex_a_id": e.vertex_a_id,
                        "vertex_b_id": e.vertex_b_id,
                        "directionality": e.directionality,
                    }
                    for e in self._edges.values()
                ],
                "totals": {
                    "vertices": self.total_vertex_count,
                    "edges": self.total_edge_count,
                    "entities": self.total_entity_count,
                },
            }
