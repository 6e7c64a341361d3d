from typing import Any, Optional, Union
from .utils import copy_params


class StatementDescriptor:
    """
    Immutable snapshot of one statement handed to the engine.

    `params` is copied on construction, so a caller mutating its own list afterwards
    does not change what was recorded.
    """
    __slots__ = ("query", "kind", "params")

    def __init__(self, query: str, kind: str, params: Any = None):
        object.__setattr__(self, "query", query)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "params", copy_params(params))

    def __setattr__(self, name, value):
        raise AttributeError("StatementDescriptor is immutable")

    def __repr__(self):
        return f"StatementDescriptor({self.query!r}, {self.kind!r}, {self.params!r})"

    def __str__(self):
        return f"[{self.kind}] {self.query} | {self.params}"

    def to_dict(self) -> dict:
        params: Union[list, dict] = dict(self.params) if isinstance(self.params, dict) else list(self.params)
        return {
            "query": self.query,
            "kind": self.kind,
            "params": params,
        }

    def __eq__(self, other):
        if not isinstance(other, StatementDescriptor):
            return False
        return (
            self.query == other.query and
            self.kind == other.kind and
            self.params == other.params
        )

    def __hash__(self):
        return hash((self.query, self.kind))


class LastQueryRecorder:
    """Single slot holding the most recently issued statement. Not a log."""
    __slots__ = ("_current",)

    def __init__(self) -> None:
        self._current: Optional[StatementDescriptor] = None

    def record(self, descriptor: StatementDescriptor) -> StatementDescriptor:
        self._current = descriptor
        return descriptor

    def current(self) -> Optional[StatementDescriptor]:
        return self._current

    def clear(self) -> None:
        self._current = None
