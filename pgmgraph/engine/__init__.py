from pgmgraph.engine.core import Edge, Entity, PGMCore, Vertex
from pgmgraph.engine.identity import (
    IdentityGenerator,
    SequentialIdentityGenerator,
    UUIDIdentityGenerator,
)

__all__ = [
    "Entity",
    "Vertex",
    "Edge",
    "PGMCore",
    "IdentityGenerator",
    "UUIDIdentityGenerator",
    "SequentialIdentityGenerator",
]
