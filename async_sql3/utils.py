from typing import Any, Iterable, Mapping, Tuple, Union, Sequence


def is_iterable(obj) -> bool:
    """
    Check if the object is iterable (excluding strings and bytes).

    Args:
        obj: The object to check.

    Returns:
        bool: True if the object is iterable, False otherwise.
    """
    return isinstance(obj, Iterable) and not isinstance(obj, (str, bytes))

def no_underscore_or_space(s: str) -> str:
    """
    Replaces underscores and spaces in a string with an empty string.

    Args:
        s (str): The input string.

    Returns:
        str: The modified string with underscores and spaces removed.
    """
    return s.replace("_", "").replace(" ", "")


def columns_to_sql(columns: Union[str, Sequence[str]]) -> str:
    """
    Render a column selection for a SELECT list.

    Args:
        columns: A raw column string ("*", "id, name") or a sequence of column names.

    Returns:
        str: The columns joined with ", ", or the string unchanged.
    """
    if is_iterable(columns):
        return ", ".join(columns)
    return columns

def is_single_column(columns: str) -> bool:
    """True when `columns` names exactly one column (not "*" and no comma)."""
    return columns != "*" and "," not in columns

def placeholders(count: int) -> str:
    return ", ".join("?" * count)

def copy_params(params) -> Union[Tuple[Any, ...], dict]:
    """
    Snapshot positional parameters into a tuple.

    Lists owned by the caller are copied so later mutation cannot leak into
    recorded statements. Mappings (named parameters) are copied into a dict.
    """
    if params is None:
        return ()
    if isinstance(params, Mapping):
        return dict(params)  # type: ignore[return-value]
    return tuple(params)

def split_row_data(data: Mapping[str, Any]) -> Tuple[list, list]:
    """Split a column -> value mapping into parallel column and value lists, in iteration order."""
    return list(data.keys()), list(data.values())
