from __future__ import annotations
from datetime import datetime
from typing import Optional, Callable, Any, List, Tuple
import asyncio
import json
import os
import aiofiles
from ..exceptions import HistoryError
from ..log import StatementDescriptor

HistoryItem = dict

CONTROL_STATEMENTS = ("BEGIN TRANSACTION", "COMMIT", "ROLLBACK")


def default_time_format_function(time_data: datetime) -> str:
    return time_data.strftime("%Y-%m-%d %H:%M:%S")


def default_history_format_function(history: HistoryItem) -> str:
    """
    Default function to format history entries for text dumps.
    """
    query, path = history["query"], history["path"]
    timestamp = history.get("timestamp", "no timestamp")
    if query in CONTROL_STATEMENTS:
        return f"[{timestamp}]({path}) : {query}\n"

    return (
        f"[{timestamp}]({path}) {history['kind']}\n"
        f"{query}\n"
        f"Input: {history['params']}\n"
    )


class StatementHistory:
    """
    Bounded history of executed statements.

    Without a dump path only the last `history_length` statements are kept. With a
    dump path the buffered statements are appended to that file every time the
    buffer fills, as JSON lines (`.jsonl`, one object per line) or formatted text
    (`.txt`).
    """

    filetypes = {".jsonl": "json", ".txt": "txt"}

    def __init__(
        self,
        history_length: Optional[int] = 10,
        dump_path: Optional[str] = None,
        database: str = "",
        history_format_function: Callable[[HistoryItem], Any] = default_history_format_function,
        time_format_function: Callable[[datetime], str] = default_time_format_function,
    ) -> None:
        self._history_length = self._validate_none_or_non_neg_int(history_length)
        self.dump_path, self.filetype = self._resolve_dump_path(dump_path)
        self.database = database
        self.history_format_function = history_format_function
        self.time_format_function = time_format_function
        self._items: List[HistoryItem] = []
        self._history_lock = asyncio.Lock()

    @staticmethod
    def _validate_none_or_non_neg_int(value: Optional[int]) -> Optional[int]:
        """Validate non-negative integer or None."""
        if value is not None and (not isinstance(value, int) or value < 0):
            raise HistoryError("history_length must be a non-negative integer or None")
        return value

    @classmethod
    def _resolve_dump_path(cls, path: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
        if path is None:
            return None, None
        extension = os.path.splitext(path)[1].lower()
        if extension not in cls.filetypes:
            raise HistoryError(f"Cannot detect history file type from path: {path}")
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        return os.path.abspath(path), cls.filetypes[extension]

    @property
    def enabled(self) -> bool:
        return bool(self._history_length)

    @property
    def history_length(self) -> Optional[int]:
        return self._history_length

    @history_length.setter
    def history_length(self, value: Optional[int]) -> None:
        self._history_length = self._validate_none_or_non_neg_int(value)
        if not self._history_length:
            self._items.clear()
        elif len(self._items) > self._history_length:
            del self._items[:-self._history_length]

    @property
    def items(self) -> Tuple[HistoryItem, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    async def append(self, descriptor: StatementDescriptor) -> None:
        """Append a statement to history, flushing or trimming when the buffer fills."""
        if not self.enabled:
            return

        item = descriptor.to_dict()
        item["path"] = self.database
        item["timestamp"] = self.time_format_function(datetime.now())

        async with self._history_lock:
            self._items.append(item)
            if len(self._items) < self._history_length:  # type: ignore[operator]
                return
            if self.dump_path is None:
                del self._items[:-self._history_length]
            else:
                await self._write(self._flush())

    async def flush_to_file(self) -> None:
        """Write every buffered statement to the dump file and empty the buffer."""
        if self.dump_path is None:
            return
        async with self._history_lock:
            await self._write(self._flush())

    def _flush(self) -> List[HistoryItem]:
        items, self._items = self._items, []
        return items

    async def _write(self, items: List[HistoryItem]) -> None:
        if not items:
            return
        if self.filetype == "json":
            chunk = "".join(json.dumps(item, default=str) + "\n" for item in items)
        else:
            chunk = "".join(str(self.history_format_function(item)) for item in items)
        async with aiofiles.open(self.dump_path, "a", encoding="utf-8") as f:  # type: ignore[arg-type]
            await f.write(chunk)
