import aiosqlite
from aiosqlite import Connection
from typing import Optional, List, Any, Union, AsyncIterator
import logging
from ..exceptions import RunError, AllError, GetError
from ..types import MutationResult, QueryParams, Record
from .statement_kinds import StatementKind, Mutation, Rows, SingleRow, Stream, normalize_kind


_logger = logging.getLogger(__name__)


def _bind(params: QueryParams) -> Any:
    return () if params is None else params

def _inserts_rows(query: str) -> bool:
    return query.lstrip().upper().startswith(("INSERT", "REPLACE"))

# === Engine primitives ===

async def execute_mutation(conn: Connection, query: str, params: QueryParams = None, *,
                           logger: logging.Logger = _logger) -> MutationResult:
    """
    Execute an INSERT, UPDATE, DELETE, DDL or control statement.
    Args:
        conn (Connection): An open aiosqlite connection.
        query (str): SQL with "?" placeholders.
        params (Sequence, optional): Positional parameters. Defaults to none.
        logger (logging.Logger, optional): Logger used to report engine failures.
    Returns:
        MutationResult: rowid of the row this INSERT added (None for other statements and
            for inserts that added nothing) and the number of changed rows.
    Raises:
        RunError: If the engine rejects the statement. The engine message is kept verbatim.
    """
    try:
        async with conn.execute(query, _bind(params)) as cursor:
            rows_affected = max(cursor.rowcount, 0)
            # lastrowid is connection-wide; it only belongs to this statement if it inserted
            inserted = rows_affected > 0 and _inserts_rows(query)
            return MutationResult(
                inserted_id=(cursor.lastrowid or None) if inserted else None,
                rows_affected=rows_affected,
            )
    except aiosqlite.Error as db_error:
        logger.error(f"SQLite error during run: {db_error}")
        raise RunError(str(db_error), query) from db_error


async def execute_rows(conn: Connection, query: str, params: QueryParams = None, *,
                       logger: logging.Logger = _logger) -> List[Record]:
    """
    Execute a query and return every matching record.

    Returns an empty list, never None, when nothing matches.

    Raises:
        AllError: If the engine rejects the statement.
    """
    try:
        async with conn.execute(query, _bind(params)) as cursor:
            rows = await cursor.fetchall()
    except aiosqlite.Error as db_error:
        logger.error(f"SQLite error during all: {db_error}")
        raise AllError(str(db_error), query) from db_error
    return list(rows) if rows else []


async def execute_single_row(conn: Connection, query: str, params: QueryParams = None, *,
                             logger: logging.Logger = _logger) -> Optional[Record]:
    """
    Execute a query and return its first record, or None when no row matched.

    Raises:
        GetError: If the engine rejects the statement. Zero rows is not an error.
    """
    try:
        async with conn.execute(query, _bind(params)) as cursor:
            row = await cursor.fetchone()
    except aiosqlite.Error as db_error:
        logger.error(f"SQLite error during get: {db_error}")
        raise GetError(str(db_error), query) from db_error
    return row if row else None


async def stream_rows(conn: Connection, query: str, params: QueryParams = None, *,
                      logger: logging.Logger = _logger) -> AsyncIterator[Record]:
    """
    Iterate over the records of a query.

    This is a buffer-then-replay iterator, not a cursor: the whole result set is
    fetched into memory before the first record is yielded, so it saves no memory
    over `execute_rows`.

    Raises:
        AllError: If the engine rejects the statement, on the first iteration.
    """
    rows = await execute_rows(conn, query, params, logger=logger)
    for row in rows:
        yield row

# === Dispatch ===

async def try_query(
    conn: Connection,
    query: str,
    params: QueryParams = None,
    kind: Union[str, StatementKind] = "rows",
    log: bool = False,
    *,
    logger: logging.Logger = _logger,
    **kwargs
) -> Any:

    """
    Execute a statement with the primitive matching its kind.
    Args:
        conn (Connection): An open aiosqlite connection.
        query (str): The SQL statement to execute.
        params (Sequence, optional): Positional parameters for "?" placeholders.
        kind (Union[str, StatementKind], optional): "rows", "single-row", "mutation" or
            "stream", or any alias accepted by `Kind`. Defaults to "rows".
        log (bool, optional): Whether to log the statement before execution. Defaults to False.
        logger (logging.Logger, optional): Logger instance for logging operations.
        **kwargs: Additional keyword arguments (currently unused, reserved for future extensions).
    Returns:
        List of records, one record or None, a MutationResult, or an async iterator of
        records, depending on `kind`.
    Raises:
        RunError, AllError, GetError: If the engine rejects the statement.
        ValueError: If `kind` names no known statement kind.
    Examples:
        >>> rows = await try_query(conn, "SELECT * FROM users")
        >>> user = await try_query(conn, "SELECT * FROM users WHERE id = ?", (1,), "one")
        >>> await try_query(conn, "DELETE FROM users WHERE id = ?", (1,), "run")
    """

    sk = normalize_kind(kind)
    if log:
        logger.info(f"Executing query: {query} | Params: {params or 'None'}")

    if isinstance(sk, Mutation):
        return await execute_mutation(conn, query, params, logger=logger)
    if isinstance(sk, SingleRow):
        return await execute_single_row(conn, query, params, logger=logger)
    if isinstance(sk, Stream):
        return stream_rows(conn, query, params, logger=logger)
    if isinstance(sk, Rows):
        return await execute_rows(conn, query, params, logger=logger)
    raise ValueError(f"Unsupported statement kind: {sk!r}")
