from typing import Optional


class SQL3Error(Exception):
    """Base exception for the async SQL3 wrapper."""
    pass

class ConnectionError(SQL3Error):
    """Raised when opening, closing or using the connection fails."""
    pass

# Executor errors

class ExecutionError(SQL3Error):
    """
    Raised when the engine rejects a statement.

    The engine's own message is kept verbatim in `engine_message`.
    """
    prefix = "SQL error"

    def __init__(self, engine_message: str, query: Optional[str] = None):
        self.engine_message = engine_message
        self.query = query
        super().__init__(f"{self.prefix}: {engine_message}")

class RunError(ExecutionError):
    """Raised when a mutation statement fails."""
    prefix = "SQL run error"

class AllError(ExecutionError):
    """Raised when a row-set query fails."""
    prefix = "SQL all error"

class GetError(ExecutionError):
    """Raised when a single-row query fails."""
    prefix = "SQL get error"

# Transaction state errors

class TransactionError(SQL3Error):
    """Raised when transaction operations fail."""
    pass

class TransactionAlreadyActive(TransactionError):
    pass

class NoActiveTransaction(TransactionError):
    pass

class MaintenanceDuringTransaction(TransactionError):
    """Raised when VACUUM is requested while a transaction is open."""
    pass

# Caller input errors

class ValidationError(SQL3Error):
    """Raised when caller input is rejected before a statement is built."""
    pass

class InvalidSchemaDefinition(ValidationError):
    pass

class InvalidRowData(ValidationError):
    pass

class HistoryError(SQL3Error):
    """Raised when history operations fail."""
    pass
