"""Identity generators for graph entities.

The graph never mints identities itself; it asks an injected generator.
Production graphs use random UUIDs, tests use sequential identities so
assertions can name them.
"""

import threading
import uuid
from typing import Any, Protocol


class IdentityGenerator(Protocol):
    """Anything that can produce globally unique, comparable identifiers."""

    def new_id(self) -> str: ...


class UUIDIdentityGenerator:
    """Random version 4 UUIDs rendered as strings."""

    def new_id(self) -> str:
        return str(uuid.uuid4())


class SequentialIdentityGenerator:
    """Deterministic identities: ``id-1``, ``id-2``, ...

    Thread-safe, so one generator may be shared by several graphs.
    """

    def __init__(self, prefix: str = "id", start: int = 1) -> None:
        self._prefix = prefix
        self._next = start
        self._lock = threading.Lock()

    def __getstate__(self) -> dict[str, Any]:
        """Support for pickle - exclude the lock."""
        state = self.__dict__.copy()
        del state["_lock"]
        return state

    def __setstate__(self, state: dict[str, Any]) -> None:
        """Support for pickle - recreate the lock."""
        self.__dict__.update(state)
        self._lock = threading.Lock()

    def new_id(self) -> str:
        with self._lock:
            value = self._next
            self._next += 1
            return f"{self._prefix}-{value}"
