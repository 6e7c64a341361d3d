from __future__ import annotations
import inspect
from typing import Optional, Any, Mapping, Tuple, List

from .connection_base import SQL3Base
from .conditions import ConditionAccumulator
from .query import Query
from ..exceptions import RunError, InvalidRowData, InvalidSchemaDefinition
from ..types import (
    Columns,
    Record,
    Records,
    RowData,
    BatchCallback,
    MutationResult,
    InsertResult,
    PageResult,
)
from ..utils import columns_to_sql, is_single_column, placeholders, split_row_data


class SQL3(SQL3Base):
    """
    Fluent SQLite wrapper: chain `where` calls, then run one terminal operation.

        async with SQL3("app.db") as db:
            users = await db.where("name", "%John%", "AND", "LIKE").get("users")

    Every terminal operation consumes the pending conditions before it executes,
    so they are gone once it returns, whether it succeeded or raised. Use `query()`
    for a builder that keeps its conditions to itself.
    """

    # Condition building
    def where(self, column: str, value: Any, operator: str = "AND", comparison: str = "=") -> SQL3:
        """
        Add a WHERE condition to the pending query.

        Args:
            column: Column name, emitted verbatim.
            value: Value bound to the "?" placeholder.
            operator: "AND" or "OR", joining this condition to the ones before it.
                Ignored for the first condition.
            comparison: Comparison operator ("=", ">", "<", "LIKE", ...), emitted verbatim.
        """
        self._conditions.add_condition(column, value, operator, comparison)
        return self

    def or_where(self, column: str, value: Any, comparison: str = "=") -> SQL3:
        return self.where(column, value, "OR", comparison)

    def query(self) -> Query:
        """Start an independent query builder bound to this connection."""
        return Query(self)

    @property
    def pending_conditions(self) -> ConditionAccumulator:
        return self._conditions

    # Terminal operations
    async def get(self, table: str, columns: Columns = "*") -> Records:
        """Retrieve all matching rows; an empty list if none match."""
        with self._conditions.consume() as conditions:
            return await self._select(table, columns, conditions)

    async def get_one(self, table: str, columns: Columns = "*") -> Any:
        """
        Retrieve the first matching row, or None.

        When `columns` names a single column the value of that column is returned
        instead of the record.
        """
        with self._conditions.consume() as conditions:
            return await self._select_one(table, columns, conditions)

    async def count(self, table: str, column: str = "*") -> int:
        """Count matching rows. 0 when nothing matches."""
        with self._conditions.consume() as conditions:
            return await self._count(table, column, conditions)

    async def insert(self, table: str, data: RowData, *, raise_on_fail: bool = False) -> InsertResult:
        """
        Insert one row built from a column -> value mapping.

        Unlike the other operations a failing INSERT does not raise by default: it
        returns `InsertResult(success=False, error=...)`. Pass `raise_on_fail=True`
        to get the RunError instead. Invalid `data` always raises InvalidRowData.
        """
        columns, values = self._split_row_data(data, "insert")
        query = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders(len(values))})"

        try:
            result = await self._run(query, values)
        except RunError as e:
            if raise_on_fail:
                raise
            self._call_logger("warning", f"Insert into {table} failed: {e}")
            return InsertResult(success=False, error=str(e))
        return InsertResult(success=True, inserted_id=result.inserted_id)

    async def update(self, table: str, data: RowData) -> MutationResult:
        """Update matching rows. Parameters bind the SET values first, then the WHERE values."""
        with self._conditions.consume() as conditions:
            return await self._update(table, data, conditions)

    async def delete(self, table: str) -> MutationResult:
        """Delete matching rows. Without conditions every row is deleted."""
        with self._conditions.consume() as conditions:
            return await self._delete(table, conditions)

    async def paginate(self, table: str, page: int = 1, per_page: int = 10,
                       columns: Columns = "*") -> PageResult:
        """
        Fetch one page of matching rows plus pagination metadata.

        The pending conditions filter both the total and the page itself.
        """
        with self._conditions.consume() as conditions:
            return await self._paginate(table, page, per_page, columns, conditions)

    async def batch_process(self, table: str, batch_size: int, callback: BatchCallback,
                            columns: Columns = "*") -> int:
        """
        Feed matching rows to `callback` in batches of `batch_size`.

        Batches are fetched and handled one after another; a coroutine callback is
        awaited before the next batch is fetched. The callback never receives an
        empty batch. Returns the number of rows processed.
        """
        with self._conditions.consume() as conditions:
            return await self._batch_process(table, batch_size, callback, columns, conditions)

    batch_size = batch_process

    # Schema helpers
    async def table_exists(self, table: str) -> bool:
        result = await self._get(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table,)
        )
        return result is not None

    async def create_table(self, table: str, columns: Mapping[str, str]) -> MutationResult:
        """
        Create a table if it does not exist.

        Args:
            table: Table name.
            columns: Column definitions, e.g. {"id": "INTEGER PRIMARY KEY", "name": "TEXT"}.
        """
        if not isinstance(columns, Mapping) or not columns:
            raise InvalidSchemaDefinition("Invalid columns definition")

        column_defs = ", ".join(f"{name} {type_}" for name, type_ in columns.items())
        return await self._run(f"CREATE TABLE IF NOT EXISTS {table} ({column_defs})")

    async def drop_table(self, table: str) -> MutationResult:
        return await self._run(f"DROP TABLE IF EXISTS {table}")

    # Statement construction, shared with Query builders
    @staticmethod
    def _split_row_data(data: RowData, operation: str) -> Tuple[List[str], List[Any]]:
        if not isinstance(data, Mapping) or not data:
            raise InvalidRowData(f"Invalid data for {operation}")
        return split_row_data(data)

    async def _select(self, table: str, columns: Columns, conditions: ConditionAccumulator) -> Records:
        where_clause, params = conditions.render()
        query = f"SELECT {columns_to_sql(columns)} FROM {table}{where_clause}"
        return await self._all(query, params)

    async def _select_one(self, table: str, columns: Columns, conditions: ConditionAccumulator) -> Any:
        column_str = columns_to_sql(columns)
        where_clause, params = conditions.render()
        query = f"SELECT {column_str} FROM {table}{where_clause} LIMIT 1"
        result: Optional[Record] = await self._get(query, params)

        if result is None:
            return None
        if is_single_column(column_str):
            return next(iter(result.values()))
        return result

    async def _count(self, table: str, column: str, conditions: ConditionAccumulator) -> int:
        where_clause, params = conditions.render()
        return await self._count_where(table, column, where_clause, params)

    async def _count_where(self, table: str, column: str, where_clause: str, params: list) -> int:
        query = f"SELECT COUNT({column}) as count FROM {table}{where_clause}"
        result = await self._get(query, params)
        if result is None:
            return 0
        return result.get("count") or 0

    async def _update(self, table: str, data: RowData, conditions: ConditionAccumulator) -> MutationResult:
        columns, values = self._split_row_data(data, "update")
        set_clauses = ", ".join(f"{column} = ?" for column in columns)
        where_clause, params = conditions.render()

        query = f"UPDATE {table} SET {set_clauses}{where_clause}"
        return await self._run(query, [*values, *params])

    async def _delete(self, table: str, conditions: ConditionAccumulator) -> MutationResult:
        where_clause, params = conditions.render()
        return await self._run(f"DELETE FROM {table}{where_clause}", params)

    async def _paginate(self, table: str, page: int, per_page: int, columns: Columns,
                        conditions: ConditionAccumulator) -> PageResult:
        if not isinstance(page, int) or page < 1:
            raise ValueError("page must be a positive integer")
        if not isinstance(per_page, int) or per_page < 1:
            raise ValueError("per_page must be a positive integer")

        offset = (page - 1) * per_page
        # Rendered once: the total and the page must see the same filter.
        where_clause, params = conditions.render()
        total = await self._count_where(table, "*", where_clause, params)

        query = (f"SELECT {columns_to_sql(columns)} FROM {table}{where_clause} "
                 f"LIMIT {per_page} OFFSET {offset}")
        rows = await self._all(query, params)
        return PageResult(rows=rows, total=total, per_page=per_page, current_page=page)

    async def _batch_process(self, table: str, batch_size: int, callback: BatchCallback,
                             columns: Columns, conditions: ConditionAccumulator) -> int:
        if not isinstance(batch_size, int) or batch_size < 1:
            raise ValueError("batch_size must be a positive integer")

        where_clause, params = conditions.render()
        base_query = f"SELECT {columns_to_sql(columns)} FROM {table}{where_clause}"
        offset = processed = 0

        while True:
            batch = await self._all(f"{base_query} LIMIT {batch_size} OFFSET {offset}", params)
            if not batch:
                break
            outcome = callback(batch)
            if inspect.isawaitable(outcome):
                await outcome
            processed += len(batch)
            offset += batch_size

        return processed
