"""Shared fixtures for pgmgraph tests."""

import pytest

from pgmgraph import PGM
from pgmgraph.engine import PGMCore, SequentialIdentityGenerator
from pgmgraph.ingest import DEMO_SENTENCES, ingest_corpus


@pytest.fixture()
def core():
    """Empty graph with deterministic identities (id-1, id-2, ...)."""
    return PGMCore(SequentialIdentityGenerator())


@pytest.fixture()
def pgm():
    """Fresh client with deterministic identities."""
    return PGM(id_generator=SequentialIdentityGenerator())


@pytest.fixture()
def demo_core():
    """Graph built from the five demo sentences with non-overlapping pairs.

    Vertices (19 distinct): "what" seen 4 times, "is" 3 times,
    "the", "eric", "happiness", "of" twice each, the rest once.

    Edges (12 distinct): "what_is" seen 3 times, the rest once.
    """
    core = PGMCore(SequentialIdentityGenerator())
    ingest_corpus(core, DEMO_SENTENCES)
    return core
