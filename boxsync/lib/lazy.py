"""
Deferred fetching of field values.

Objects decoded from a folder tree know the ID of their owner and the
IDs of their tags, but not the owner's email or the tag texts.  Looking
those up eagerly would cost a round trip per node, so the fields are
wrapped in a LazyField and resolved on first read instead.

A LazyField is in one of two states:

* Unresolved - it holds a key and a fetch function
* Resolved - it holds the value

The transition happens at most once.  There is no way back.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any
from typing import Callable
from typing import Generic
from typing import TypeVar

K = TypeVar("K")
V = TypeVar("V")


@dataclass(frozen=True)
class Unresolved(Generic[K, V]):
    key: K
    fetch: Callable[[K], V]


@dataclass(frozen=True)
class Resolved(Generic[V]):
    value: V


class LazyField(Generic[K, V]):
    """
    A value which is either known already, or can be fetched by key the
    first time somebody asks for it.

    Example:
        text = LazyField(key=34, fetch=lookup_tag_text)
        text.is_resolved   # False, nothing fetched yet
        text.value         # calls lookup_tag_text(34)
        text.value         # cached, no call
    """

    def __init__(self, key: K = None, fetch: Callable[[K], V] = None) -> None:
        if fetch is None:
            raise ValueError("an unresolved LazyField needs a fetch function")
        self._state: Unresolved[K, V] | Resolved[V] = Unresolved(key, fetch)
        self._lock = threading.Lock()

    @classmethod
    def resolved(cls, value: V) -> "LazyField[Any, V]":
        field = cls.__new__(cls)
        field._state = Resolved(value)
        field._lock = threading.Lock()
        return field

    @property
    def is_resolved(self) -> bool:
        return isinstance(self._state, Resolved)

    @property
    def key(self) -> K | None:
        state = self._state
        if isinstance(state, Unresolved):
            return state.key
        return None

    @property
    def value(self) -> V:
        state = self._state
        if isinstance(state, Resolved):
            return state.value
        with self._lock:
            ## somebody else may have resolved it while we waited
            state = self._state
            if isinstance(state, Resolved):
                return state.value
            value = state.fetch(state.key)
            self._state = Resolved(value)
            return value

    def peek(self, default: V | None = None) -> V | None:
        """Returns the value if resolved, else default.  Never fetches."""
        state = self._state
        if isinstance(state, Resolved):
            return state.value
        return default

    def __repr__(self) -> str:
        state = self._state
        if isinstance(state, Resolved):
            return f"LazyField(resolved={state.value!r})"
        return f"LazyField(key={state.key!r}, unresolved)"
