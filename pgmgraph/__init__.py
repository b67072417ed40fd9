"""pgmgraph — a deduplicated, concurrency-safe graph of observed entities with empirical probabilities."""

__version__ = "0.1.0"

from pgmgraph.client import PGM
from pgmgraph.models import (
    Edge,
    EdgeReport,
    GraphStats,
    ValidationResult,
    Vertex,
    VertexReport,
)
from pgmgraph.probability import EmptyGraphError

__all__ = [
    "Edge",
    "EdgeReport",
    "EmptyGraphError",
    "GraphStats",
    "PGM",
    "ValidationResult",
    "Vertex",
    "VertexReport",
    "__version__",
]
