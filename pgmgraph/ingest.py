"""Turn sentences into word-pair observations on a graph.

Each word becomes a vertex and each pair of words an edge named
``"<first>_<second>"``. With the default stride of 2 a sentence is cut into
non-overlapping pairs, so "what is thought eric baum" yields (what, is) and
(thought, eric); the trailing odd word is dropped. A stride of 1 gives
overlapping bigrams instead.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor

from pgmgraph.engine.core import Edge, PGMCore, Vertex

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "_"
DEFAULT_DIRECTIONALITY = "directed"

DEMO_SENTENCES: list[list[str]] = [
    ["what", "is", "thought", "eric", "baum"],
    ["what", "is", "happiness", "eric", "whitegate"],
    ["what", "do", "happiness", "and", "fear", "have", "in", "common"],
    ["on", "the", "nature", "of", "things", "whitegate"],
    ["what", "is", "the", "meaning", "of", "this"],
]

_WORD_RE = re.compile(r"[a-z0-9']+")


def tokenize(text: str) -> list[str]:
    """Lowercase words of a sentence, punctuation dropped."""
    return _WORD_RE.findall(text.lower())


def word_pairs(tokens: Sequence[str], stride: int = 2) -> Iterator[tuple[str, str]]:
    """Yield (tokens[i], tokens[i + 1]) for i = 0, stride, 2 * stride, ..."""
    if stride < 1:
        raise ValueError(f"stride must be >= 1, got: {stride}")
    for i in range(0, len(tokens) - 1, stride):
        yield tokens[i], tokens[i + 1]


def edge_name(a: str, b: str, separator: str = DEFAULT_SEPARATOR) -> str:
    return f"{a}{separator}{b}"


def observe_pair(
    core: PGMCore,
    a: str,
    b: str,
    *,
    separator: str = DEFAULT_SEPARATOR,
    directionality: str = DEFAULT_DIRECTIONALITY,
) -> Edge:
    """Record one observation of ``a`` followed by ``b``.

    Upserts both vertices and the edge, then links the edge into both
    endpoints' adjacency.
    """
    va = core.upsert_vertex(Vertex(a))
    vb = core.upsert_vertex(Vertex(b))
    edge = core.upsert_edge(
        Edge(
            edge_name(a, b, separator),
            vertex_a_id=va.id,
            vertex_b_id=vb.id,
            directionality=directionality,
        )
    )
    core.link_edge(edge)
    return edge


def ingest_sentence(
    core: PGMCore,
    tokens: Sequence[str],
    *,
    stride: int = 2,
    separator: str = DEFAULT_SEPARATOR,
    directionality: str = DEFAULT_DIRECTIONALITY,
) -> int:
    """Observe every word pair of one tokenized sentence.

    Returns:
        Number of pairs observed
    """
    pairs = 0
    for a, b in word_pairs(tokens, stride):
        observe_pair(core, a, b, separator=separator, directionality=directionality)
        pairs += 1
    return pairs


def ingest_corpus(
    core: PGMCore,
    sentences: Iterable[str | Sequence[str]],
    *,
    workers: int = 1,
    stride: int = 2,
    separator: str = DEFAULT_SEPARATOR,
    directionality: str = DEFAULT_DIRECTIONALITY,
) -> int:
    """Observe every sentence of a corpus, optionally across worker threads.

    Raw strings are tokenized first; token sequences are used as given.

    Returns:
        Total number of pairs observed
    """
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got: {workers}")

    token_lists = [tokenize(s) if isinstance(s, str) else list(s) for s in sentences]

    def _ingest(tokens: list[str]) -> int:
        return ingest_sentence(
            core, tokens, stride=stride, separator=separator, directionality=directionality
        )

    if workers == 1:
        total = sum(_ingest(tokens) for tokens in token_lists)
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            total = sum(pool.map(_ingest, token_lists))

    logger.info(
        "Ingested %d sentences (%d pairs) with %d worker(s)", len(token_lists), total, workers
    )
    return total
