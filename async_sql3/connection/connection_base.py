from __future__ import annotations
import aiosqlite
from aiosqlite import Connection as AioConnection
from typing import Optional, Callable, Any, Union, AsyncIterator, Type
from logging import Logger, getLogger as logging_getLogger

from .conditions import ConditionAccumulator
from .history import StatementHistory, default_history_format_function
from .transaction import Transaction, TransactionState, TransactionStateMachine
from ..exceptions import ConnectionError
from ..types import QueryParams, MutationResult, Record, Records
from ..log import StatementDescriptor, LastQueryRecorder
from ..execution_async import (
    try_query,
    StatementKind,
    Kind,
    Mutation,
    Rows,
    SingleRow,
    Stream,
    dict_row_factory,
    converting_dict_row_factory,
)


class SQL3Base:
    """
    One aiosqlite connection plus the state tied to it: pending conditions, the
    last-query slot, the optional statement history and the transaction state.

    Nothing here is shared between instances. The connection is opened with
    `isolation_level=None`, so the driver never starts transactions on its own;
    BEGIN / COMMIT / ROLLBACK are issued only by the transaction state machine.
    """

    def __init__(
        self,
        database: str,
        omni_log: bool = False,
        logger: Optional[Logger] = None,
        convert_types: bool = False,
        *,
        history_length: Optional[int] = None,
        history_dump_path: Optional[str] = None,
        history_format_function: Callable[[dict], Any] = default_history_format_function,
        **connect_kwargs: Any,
    ) -> None:

        self.database = database
        self.omni_log = omni_log
        self.convert_types = convert_types
        self.logger = logger or logging_getLogger(__name__)
        self._connect_kwargs = connect_kwargs
        self._conn: Optional[AioConnection] = None

        self._conditions = ConditionAccumulator()
        self._recorder = LastQueryRecorder()
        self._history = StatementHistory(
            history_length=history_length,
            dump_path=history_dump_path,
            database=database,
            history_format_function=history_format_function,
        )
        self._transaction = TransactionStateMachine(
            self._run,
            logger=self.logger,
            engine_active=lambda: self._conn is not None and self._conn.in_transaction,
        )

    # Connection Management
    async def connect(self) -> SQL3Base:
        """Open the database connection. Calling it again on an open connection is a no-op."""
        if self._conn is not None:
            return self

        try:
            conn = await aiosqlite.connect(self.database, isolation_level=None, **self._connect_kwargs)
        except Exception as e:
            raise ConnectionError(f"Failed to connect to {self.database}: {e}") from e

        conn.row_factory = converting_dict_row_factory if self.convert_types else dict_row_factory
        self._conn = conn
        self._call_logger("debug", f"Connected to {self.database}")
        return self

    open = connect

    async def close(self) -> None:
        """
        Close the database connection.

        Pending conditions and the transaction state are reset even if closing fails;
        an open transaction is abandoned (the engine rolls it back).
        """
        conn, self._conn = self._conn, None
        try:
            try:
                await self.flush_history_to_file()
            finally:
                if conn is not None:
                    await conn.close()
        except Exception as e:
            raise ConnectionError(f"Failed to close database: {e}") from e
        finally:
            self._conditions.reset()
            self._transaction.force_idle()

    disconnect = close

    async def __aenter__(self) -> SQL3Base:
        return await self.connect()

    async def __aexit__(self, exc_type: Optional[Type[BaseException]],
                        exc_val: Optional[BaseException], exc_tb) -> None:
        await self.close()

    # Properties
    @property
    def connection(self) -> AioConnection:
        if self._conn is None:
            raise ConnectionError(f"Database {self.database} is not connected")
        return self._conn

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    @property
    def history(self) -> StatementHistory:
        return self._history

    @property
    def transaction_state(self) -> TransactionState:
        self._transaction.sync_with_engine()
        return self._transaction.state

    @property
    def in_transaction(self) -> bool:
        self._transaction.sync_with_engine()
        return self._transaction.is_active

    def current_statement(self) -> Optional[StatementDescriptor]:
        """The most recently issued statement, or None before the first one."""
        return self._recorder.current()

    get_last_query = current_statement

    # Utility Methods
    def _should_log(self, log: bool, override_omnilog: bool = False) -> bool:
        return log or (self.omni_log and not override_omnilog)

    def _call_logger(self, method: str, *args, **kwargs) -> None:
        if self.logger:
            f = getattr(self.logger, method, None)
            if callable(f):
                f(*args, **kwargs)

    async def flush_history_to_file(self) -> None:
        await self._history.flush_to_file()

    # Execution
    async def _execute(
        self,
        query: str,
        params: QueryParams = None,
        kind: Union[str, StatementKind] = "rows",
        log: bool = False,
        override_omnilog: bool = False,
    ) -> Any:
        conn = self.connection
        sk = Kind(kind)

        descriptor = self._recorder.record(StatementDescriptor(query, sk.type, params))
        await self._history.append(descriptor)

        if self._should_log(log, override_omnilog):
            self._call_logger("info", f"{query} | {descriptor.params}")

        return await try_query(conn, query, params, sk, logger=self.logger)

    async def execute(
        self,
        query: str,
        params: QueryParams = None,
        kind: Union[str, StatementKind] = "rows",
        *,
        log: bool = False,
        override_omnilog: bool = False,
    ) -> Any:
        """
        Execute a raw SQL statement.

        Args:
            query (str): SQL statement with "?" placeholders.
            params (Sequence, optional): Positional parameters.
            kind (str or StatementKind): "rows" (alias "all"), "single-row" ("one", "get"),
                "mutation" ("run") or "stream" ("each").
            log (bool): Whether to log this statement.
            override_omnilog (bool): Suppress logging even when omni_log is set.

        Returns:
            A list of records, one record or None, a MutationResult, or an async
            iterator of records for "stream".
        """
        return await self._execute(query, params, kind, log=log, override_omnilog=override_omnilog)

    async def _run(self, query: str, params: QueryParams = None) -> MutationResult:
        return await self._execute(query, params, Mutation())

    async def _all(self, query: str, params: QueryParams = None) -> Records:
        return await self._execute(query, params, Rows())

    async def _get(self, query: str, params: QueryParams = None) -> Optional[Record]:
        return await self._execute(query, params, SingleRow())

    async def each(self, query: str, params: QueryParams = None) -> AsyncIterator[Record]:
        """
        Iterate over the records of a query with `async for`.

        The result set is fetched completely before the first record is yielded.
        """
        rows = await self._execute(query, params, Stream())
        async for row in rows:
            yield row

    # Transaction Management
    async def begin_transaction(self) -> None:
        """Begin a transaction. Raises TransactionAlreadyActive if one is open."""
        await self._transaction.begin()

    begin = begin_transaction

    async def commit(self) -> None:
        """Commit the open transaction. Raises NoActiveTransaction if there is none."""
        await self._transaction.commit()

    async def rollback(self) -> None:
        """Roll back the open transaction; does nothing if there is none."""
        await self._transaction.rollback()

    async def vacuum(self, into: Optional[str] = None) -> None:
        """
        Rebuild the database file, or write a compacted copy to `into`.

        Raises MaintenanceDuringTransaction while a transaction is open.
        """
        await self._transaction.compact(into)

    compact = vacuum

    def transaction(self, autocommit: bool = True, logger: Optional[Logger] = None) -> Transaction:
        return Transaction(self, autocommit, logger or self.logger)
