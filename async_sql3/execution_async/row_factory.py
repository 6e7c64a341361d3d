"""
Row factories turning SQLite rows into records.

Records are dictionaries keyed by column name. `converting_dict_row_factory`
additionally turns decimal-integer strings back into `int`, for TEXT columns or
CAST expressions that carry integers.
"""
from typing import Any, Tuple
import sqlite3


def convert_value(value: Any) -> Any:
    """
    Convert a value to its appropriate Python type.

    Only decimal integer strings are converted. Strings with prefixes like
    '0x' or float strings like '123.45' are preserved, and so is any string
    that would not survive the round trip (e.g. '007').

    Examples:
        >>> convert_value('123')
        123
        >>> convert_value('007')
        '007'
        >>> convert_value('hello')
        'hello'
    """
    if not isinstance(value, str) or not value:
        return value

    if '.' in value or value.startswith(('0x', '0X', '0o', '0O', '0b', '0B')):
        return value

    try:
        int_value = int(value)
    except (ValueError, OverflowError):
        return value

    # Verify round-trip conversion to ensure we're not losing information
    if str(int_value) == value:
        return int_value
    return value


def dict_row_factory(cursor: sqlite3.Cursor, row: Tuple) -> dict:
    """
    Row factory that returns rows as dictionaries keyed by column name.

    Examples:
        >>> conn.row_factory = dict_row_factory
        >>> cursor = conn.execute("SELECT 1 as id, 'hello' as name")
        >>> cursor.fetchone()
        {'id': 1, 'name': 'hello'}
    """
    fields = [column[0] for column in cursor.description]
    return dict(zip(fields, row))


def converting_dict_row_factory(cursor: sqlite3.Cursor, row: Tuple) -> dict:
    """
    Like `dict_row_factory`, with integer-like strings converted by `convert_value`.

    Examples:
        >>> conn.row_factory = converting_dict_row_factory
        >>> cursor = conn.execute("SELECT '0' as id, 'hello' as name")
        >>> cursor.fetchone()
        {'id': 0, 'name': 'hello'}
    """
    fields = [column[0] for column in cursor.description]
    return {key: convert_value(value) for key, value in zip(fields, row)}
