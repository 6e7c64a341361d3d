from .execution_async import (
    try_query,
    execute_mutation,
    execute_rows,
    execute_single_row,
    stream_rows)
from .statement_kinds import (
    StatementKind,
    Kind,
    Rows,
    SingleRow,
    Mutation,
    Stream
)
from .row_factory import dict_row_factory, converting_dict_row_factory

__all__ = ("try_query", "execute_mutation", "execute_rows", "execute_single_row", "stream_rows",
           "StatementKind", "Kind", "Rows", "SingleRow", "Mutation", "Stream",
           "dict_row_factory", "converting_dict_row_factory")
