from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Iterator, List, Tuple


class Condition:
    """
    One filter predicate of a pending query, rendered as `<column> <comparison> ?`.

    Column and comparison are emitted verbatim; only `value` is bound as a parameter.
    """
    __slots__ = ("column", "comparison", "value", "join_operator")

    def __init__(self, column: str, value: Any, join_operator: str = "AND", comparison: str = "="):
        object.__setattr__(self, "column", column)
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "join_operator", join_operator)
        object.__setattr__(self, "comparison", comparison)

    def __setattr__(self, name, value):
        raise AttributeError("Condition is immutable")

    def to_sql(self) -> str:
        return f"{self.column} {self.comparison} ?"

    def __repr__(self):
        return (f"Condition({self.column!r}, {self.value!r}, "
                f"join_operator={self.join_operator!r}, comparison={self.comparison!r})")

    def __eq__(self, other):
        if not isinstance(other, Condition):
            return False
        return (
            self.column == other.column and
            self.comparison == other.comparison and
            self.value == other.value and
            self.join_operator == other.join_operator
        )

    def __hash__(self):
        return hash((self.column, self.comparison, self.join_operator))


class ConditionAccumulator:
    """
    Ordered list of conditions contributed by chained `where` calls.

    Order matters: it is the textual order of the WHERE clause. The join operator
    stored with the first condition is never emitted; every later condition is joined
    to the text before it with its own operator.
    """

    def __init__(self) -> None:
        self._conditions: List[Condition] = []

    def add_condition(self, column: str, value: Any, join_operator: str = "AND",
                      comparison: str = "=") -> ConditionAccumulator:
        self._conditions.append(Condition(column, value, join_operator, comparison))
        return self

    def render(self) -> Tuple[str, List[Any]]:
        """
        Build the WHERE clause and its positional parameters.

        Returns:
            Tuple[str, List[Any]]: `(" WHERE a = ? OR b > ?", [1, 2])`, or `("", [])`
            when no conditions were added.
        """
        if not self._conditions:
            return "", []

        first, *rest = self._conditions
        clause = f" WHERE {first.to_sql()}"
        for condition in rest:
            clause = f"{clause} {condition.join_operator} {condition.to_sql()}"
        return clause, [condition.value for condition in self._conditions]

    def reset(self) -> None:
        self._conditions = []

    def copy(self) -> ConditionAccumulator:
        clone = ConditionAccumulator()
        clone._conditions = list(self._conditions)
        return clone

    @contextmanager
    def consume(self) -> Iterator[ConditionAccumulator]:
        """
        Detach the pending conditions for one terminal operation.

        The accumulator is empty as soon as the block is entered, so conditions never
        outlive the statement they were meant for, whether it succeeds or raises.
        """
        detached = self.copy()
        self.reset()
        try:
            yield detached
        finally:
            detached.reset()

    @property
    def conditions(self) -> Tuple[Condition, ...]:
        return tuple(self._conditions)

    def __len__(self) -> int:
        return len(self._conditions)

    def __bool__(self) -> bool:
        return bool(self._conditions)

    def __iter__(self) -> Iterator[Condition]:
        return iter(tuple(self._conditions))

    def __repr__(self):
        return f"ConditionAccumulator({self._conditions!r})"
