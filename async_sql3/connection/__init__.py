"""
Fluent async SQLite connection.

Public API:

    from async_sql3 import SQL3

    async with SQL3("example.db") as db:
        await db.create_table("users", {"id": "INTEGER PRIMARY KEY", "name": "TEXT"})
        await db.insert("users", {"name": "John"})
        johns = await db.where("name", "%John%", "AND", "LIKE").get("users")

        async with db.transaction():
            await db.where("name", "John").update("users", {"name": "Johnny"})

The lower-level pieces (SQL3Base, ConditionAccumulator, the transaction state
machine, StatementHistory) are also exported for custom integrations, but the
recommended entry point is `SQL3`.
"""

from .connection import SQL3                 # High-level facade
from .connection_base import SQL3Base        # Connection, executor and transaction wiring
from .query import Query                     # Independent query builder

from .conditions import Condition, ConditionAccumulator

from .transaction import (
    Transaction,
    TransactionState,
    TransactionStateMachine,
)

from .history import (
    StatementHistory,
    default_history_format_function,
)

__all__ = [
    # Main entry points
    "SQL3",
    "Query",
    "Transaction",

    # Advanced / extension points
    "SQL3Base",
    "Condition",
    "ConditionAccumulator",
    "TransactionState",
    "TransactionStateMachine",
    "StatementHistory",
    "default_history_format_function",
]
