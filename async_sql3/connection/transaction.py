from __future__ import annotations
from enum import Enum
from typing import Optional, Type, Union, Callable, Awaitable, Any, TYPE_CHECKING
from logging import Logger, getLogger as logging_getLogger
from ..types import QueryParams
from ..exceptions import (
    TransactionError,
    TransactionAlreadyActive,
    NoActiveTransaction,
    MaintenanceDuringTransaction,
)
from ..execution_async import StatementKind

if TYPE_CHECKING:
    from .connection_base import SQL3Base


class TransactionState(Enum):
    IDLE = "idle"
    ACTIVE = "active"


class TransactionStateMachine:
    """
    Tracks whether the connection has an open transaction and guards the
    statements that depend on it.

    IDLE --begin--> ACTIVE --commit/rollback--> IDLE. The state only changes once
    the engine accepted the statement; an illegal call raises and leaves it as is.
    `rollback` while IDLE is a no-op so it can sit in cleanup paths unconditionally.

    SQLite may end a transaction by itself (`INSERT OR ROLLBACK`, some I/O
    errors). When `engine_active` is given it is checked before every transition
    and an ACTIVE state the engine no longer backs drops to IDLE.
    """

    def __init__(self, run: Callable[..., Awaitable[Any]], logger: Optional[Logger] = None,
                 engine_active: Optional[Callable[[], bool]] = None) -> None:
        self._run = run
        self._engine_active = engine_active
        self.logger = logger or logging_getLogger(__name__)
        self.state = TransactionState.IDLE

    @property
    def is_active(self) -> bool:
        return self.state is TransactionState.ACTIVE

    def sync_with_engine(self) -> None:
        if self.is_active and self._engine_active is not None and not self._engine_active():
            self.logger.warning("Transaction was ended by the database engine")
            self.state = TransactionState.IDLE

    async def begin(self) -> None:
        self.sync_with_engine()
        if self.is_active:
            raise TransactionAlreadyActive("Transaction already active")
        await self._run("BEGIN TRANSACTION")
        self.state = TransactionState.ACTIVE
        self.logger.info("BEGIN transaction")

    async def commit(self) -> None:
        self.sync_with_engine()
        if not self.is_active:
            raise NoActiveTransaction("No active transaction to commit")
        await self._run("COMMIT")
        self.state = TransactionState.IDLE
        self.logger.info("COMMIT transaction")

    async def rollback(self) -> bool:
        """Roll back the open transaction. Returns False if there was none."""
        self.sync_with_engine()
        if not self.is_active:
            return False
        await self._run("ROLLBACK")
        self.state = TransactionState.IDLE
        self.logger.info("ROLLBACK transaction")
        return True

    async def compact(self, into: Optional[str] = None) -> None:
        """Run VACUUM, or VACUUM INTO a new database file. Not allowed inside a transaction."""
        self.sync_with_engine()
        if self.is_active:
            raise MaintenanceDuringTransaction("Cannot VACUUM within a transaction")
        if into:
            await self._run("VACUUM INTO ?", (into,))
        else:
            await self._run("VACUUM")
        self.logger.info(f"VACUUM{' INTO ' + into if into else ''} completed")

    def force_idle(self) -> None:
        self.state = TransactionState.IDLE


class Transaction:
    """
    An async context manager around BEGIN / COMMIT / ROLLBACK.

    On exit the transaction is committed when the block raised nothing and
    `autocommit` is set, and rolled back otherwise. Committing or rolling back
    inside the block ends the transaction early; exit then leaves it alone.
    """

    def __init__(
        self,
        connection: Optional[SQL3Base],
        autocommit: bool = True,
        logger: Optional[Logger] = None
    ):
        if connection is None:
            raise TransactionError("Transaction requires an existing SQL3 connection.")
        self.connection = connection
        self.autocommit = autocommit
        self.logger = logger or logging_getLogger(__name__)
        self._status: Optional[bool] = None

    async def __aenter__(self) -> Transaction:
        """Enter the transaction context."""
        try:
            await self.connection.begin_transaction()
        except TransactionError:
            raise
        except Exception as e:
            self.logger.error(f"Failed to BEGIN transaction: {e}")
            raise TransactionError(f"Failed to begin transaction: {e}") from e
        self._status = None
        return self

    async def __aexit__(self, exc_type: Optional[Type[BaseException]],
                        exc_val: Optional[BaseException], exc_tb) -> None:
        """Exit the transaction context."""
        if not self.connection.in_transaction:
            if self._status is None:
                self.logger.warning("Transaction already closed before leaving its block")
                self._status = False
            return

        try:
            if exc_type is not None:
                await self.connection.rollback()
                self._status = False
                self.logger.error(f"ROLLBACK transaction on {self.connection.database} after {exc_type.__name__}")
            elif self.autocommit:
                await self.connection.commit()
                self._status = True
            else:
                await self.connection.rollback()
                self._status = False
        except Exception as e:
            self._status = False
            self.logger.error(f"Failed to commit/rollback transaction: {e}")
            raise

    @property
    def succeeded(self) -> Optional[bool]:
        """True once committed, False once rolled back, None while still open."""
        return self._status

    @property
    def failed(self) -> Optional[bool]:
        return None if self._status is None else not self._status

    async def execute(
        self,
        query: str,
        params: QueryParams = None,
        kind: Union[str, StatementKind] = "rows",
        log: bool = False,
    ) -> Any:
        return await self.connection.execute(query, params, kind, log=log)

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self.connection.commit()
        self._status = True

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        await self.connection.rollback()
        self._status = False
