from __future__ import annotations
from typing import Any, TYPE_CHECKING

from .conditions import ConditionAccumulator
from ..types import Columns, Records, RowData, BatchCallback, MutationResult, PageResult

if TYPE_CHECKING:
    from .connection import SQL3


class Query:
    """
    A query builder with its own conditions, independent of the connection's
    pending `where` chain.

        active = db.query().where("active", 1)
        users = await active.get("users")

    Terminal operations consume the builder's conditions, so a builder describes
    exactly one statement. Builders are cheap; start a new one per query.
    """

    def __init__(self, connection: SQL3) -> None:
        self.connection = connection
        self.conditions = ConditionAccumulator()

    def where(self, column: str, value: Any, operator: str = "AND", comparison: str = "=") -> Query:
        self.conditions.add_condition(column, value, operator, comparison)
        return self

    def or_where(self, column: str, value: Any, comparison: str = "=") -> Query:
        return self.where(column, value, "OR", comparison)

    def __repr__(self):
        return f"Query({self.connection.database!r}, {self.conditions!r})"

    async def get(self, table: str, columns: Columns = "*") -> Records:
        with self.conditions.consume() as conditions:
            return await self.connection._select(table, columns, conditions)

    async def get_one(self, table: str, columns: Columns = "*") -> Any:
        with self.conditions.consume() as conditions:
            return await self.connection._select_one(table, columns, conditions)

    async def count(self, table: str, column: str = "*") -> int:
        with self.conditions.consume() as conditions:
            return await self.connection._count(table, column, conditions)

    async def update(self, table: str, data: RowData) -> MutationResult:
        with self.conditions.consume() as conditions:
            return await self.connection._update(table, data, conditions)

    async def delete(self, table: str) -> MutationResult:
        with self.conditions.consume() as conditions:
            return await self.connection._delete(table, conditions)

    async def paginate(self, table: str, page: int = 1, per_page: int = 10,
                       columns: Columns = "*") -> PageResult:
        with self.conditions.consume() as conditions:
            return await self.connection._paginate(table, page, per_page, columns, conditions)

    async def batch_process(self, table: str, batch_size: int, callback: BatchCallback,
                            columns: Columns = "*") -> int:
        with self.conditions.consume() as conditions:
            return await self.connection._batch_process(table, batch_size, callback, columns, conditions)
