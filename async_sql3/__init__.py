from .connection import SQL3, Query, Transaction, TransactionState
from .execution_async import (
    try_query,
    Kind,
    StatementKind,
    Rows,
    SingleRow,
    Mutation,
    Stream
)
from .exceptions import (
    SQL3Error,
    ConnectionError,
    ExecutionError,
    RunError,
    AllError,
    GetError,
    TransactionError,
    TransactionAlreadyActive,
    NoActiveTransaction,
    MaintenanceDuringTransaction,
    ValidationError,
    InvalidSchemaDefinition,
    InvalidRowData,
    HistoryError,
)
from .log import StatementDescriptor
from .types import MutationResult, InsertResult, PageResult

AsyncSQL3 = SQL3

__all__ = (
    "SQL3",
    "AsyncSQL3",
    "Query",
    "Transaction",
    "TransactionState",
    "try_query",
    "Kind",
    "StatementKind",
    "Rows",
    "SingleRow",
    "Mutation",
    "Stream",
    "StatementDescriptor",
    "MutationResult",
    "InsertResult",
    "PageResult",
    "SQL3Error",
    "ConnectionError",
    "ExecutionError",
    "RunError",
    "AllError",
    "GetError",
    "TransactionError",
    "TransactionAlreadyActive",
    "NoActiveTransaction",
    "MaintenanceDuringTransaction",
    "ValidationError",
    "InvalidSchemaDefinition",
    "InvalidRowData",
    "HistoryError",
)
