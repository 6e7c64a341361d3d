from typing import Union
from ..utils import no_underscore_or_space



# === StatementKind Classes ===

class StatementKind:
    """Base class naming the execution shape of a statement.

    The shape decides which engine primitive runs the statement and which error
    type reports its failure: row sets, single rows, mutations, or the buffered
    row iterator.
    """
    type: str


class Rows(StatementKind):
    def __init__(self): self.type = "rows"
    def __repr__(self): return "Rows()"
    def to_string(self) -> str: return self.type
    def __eq__(self, value): return isinstance(value, Rows)
    def __hash__(self): return hash(self.type)

class SingleRow(StatementKind):
    def __init__(self): self.type = "single-row"
    def __repr__(self): return "SingleRow()"
    def to_string(self) -> str: return self.type
    def __eq__(self, value): return isinstance(value, SingleRow)
    def __hash__(self): return hash(self.type)

class Mutation(StatementKind):
    def __init__(self): self.type = "mutation"
    def __repr__(self): return "Mutation()"
    def to_string(self) -> str: return self.type
    def __eq__(self, value): return isinstance(value, Mutation)
    def __hash__(self): return hash(self.type)

class Stream(StatementKind):
    def __init__(self): self.type = "stream"
    def __repr__(self): return "Stream()"
    def to_string(self) -> str: return self.type
    def __eq__(self, value): return isinstance(value, Stream)
    def __hash__(self): return hash(self.type)

# === Utility Functions ===

_KIND_NAMES = {
    "rows": Rows, "all": Rows, "fetchall": Rows,
    "singlerow": SingleRow, "one": SingleRow, "get": SingleRow, "fetchone": SingleRow,
    "mutation": Mutation, "run": Mutation,
    "stream": Stream, "each": Stream,
}

def Kind(arg: Union[str, StatementKind, None] = None) -> StatementKind:
    """
    Resolve a statement kind from a name or an existing kind.
    Args:
        arg (Union[str, StatementKind, None]): The kind specifier. Can be:
            - None: Returns a Rows instance.
            - str: "rows"/"all", "single-row"/"one"/"get", "mutation"/"run" or
              "stream"/"each". Case, spaces, underscores and dashes are ignored.
            - StatementKind: Returned unchanged.
    Returns:
        StatementKind: The resolved kind.
    Raises:
        ValueError: If a string argument names no known kind.
        TypeError: If the argument type is not supported.
    """

    if arg is None: return Rows()
    if isinstance(arg, StatementKind): return arg
    if isinstance(arg, str):
        name = no_underscore_or_space(arg).replace("-", "").lower()
        if name in _KIND_NAMES: return _KIND_NAMES[name]()
        raise ValueError(f"Unknown statement kind: {arg}")
    raise TypeError(f"Invalid argument type: {type(arg).__name__}")



def normalize_kind(kind: Union[str, StatementKind]) -> StatementKind:
    """
    Normalizes the input to a StatementKind instance.
    Args:
        kind (Union[str, StatementKind]): The input kind specifier.
    Returns:
        StatementKind: A normalized StatementKind instance.
    """
    return kind if isinstance(kind, StatementKind) else Kind(kind)
