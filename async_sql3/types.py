from __future__ import annotations
from dataclasses import dataclass, field
from math import ceil
from typing import Optional, Union, List, Any, Dict, Sequence, Mapping, Callable, Awaitable

# Type aliases
QueryParams = Optional[Sequence[Any]]
Record = Dict[str, Any]
Records = List[Record]
Columns = Union[str, Sequence[str]]
RowData = Mapping[str, Any]
BatchCallback = Callable[[Records], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class MutationResult:
    """
    Outcome of an INSERT, UPDATE, DELETE or DDL statement.

    Attributes:
        inserted_id: rowid of the row an INSERT added; None for UPDATE, DELETE, DDL and
            for inserts that added no row.
        rows_affected: number of rows changed; 0 for statements that change no rows.
    """
    inserted_id: Optional[int] = None
    rows_affected: int = 0


@dataclass(frozen=True)
class InsertResult:
    """Structured outcome of `SQL3.insert`, which reports failure instead of raising."""
    success: bool
    inserted_id: Optional[int] = None
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.success


@dataclass(frozen=True)
class PageResult:
    rows: Records
    total: int
    per_page: int
    current_page: int
    total_pages: int = field(init=False)
    has_more: bool = field(init=False)

    def __post_init__(self) -> None:
        total_pages = ceil(self.total / self.per_page)
        object.__setattr__(self, "total_pages", total_pages)
        object.__setattr__(self, "has_more", self.current_page < total_pages)

    def to_dict(self) -> dict:
        return {
            "data": self.rows,
            "pagination": {
                "total": self.total,
                "per_page": self.per_page,
                "current_page": self.current_page,
                "total_pages": self.total_pages,
                "has_more": self.has_more,
            },
        }
