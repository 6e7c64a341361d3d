# tests/execution_async/test_execution_async.py
import pytest
import pytest_asyncio
import aiosqlite
from unittest.mock import MagicMock
from ...execution_async.execution_async import (
    execute_mutation,
    execute_rows,
    execute_single_row,
    stream_rows,
    try_query,
)
from ...execution_async.row_factory import dict_row_factory
from ...execution_async.statement_kinds import Mutation
from ...exceptions import RunError, AllError, GetError
from ...types import MutationResult


@pytest_asyncio.fixture
async def conn():
    """An in-memory connection with a small `items` table."""
    connection = await aiosqlite.connect(":memory:", isolation_level=None)
    connection.row_factory = dict_row_factory
    await connection.execute("CREATE TABLE items (id INTEGER PRIMARY KEY, label TEXT)")
    await connection.executemany("INSERT INTO items (label) VALUES (?)", [("a",), ("b",), ("c",)])
    yield connection
    await connection.close()


class TestExecuteMutation:

    @pytest.mark.asyncio
    async def test_insert_reports_rowid(self, conn):
        """Test an INSERT reports its rowid and one affected row."""
        result = await execute_mutation(conn, "INSERT INTO items (label) VALUES (?)", ("d",))
        assert result == MutationResult(inserted_id=4, rows_affected=1)

    @pytest.mark.asyncio
    async def test_update_reports_rows_affected(self, conn):
        """Test an UPDATE reports how many rows changed."""
        result = await execute_mutation(conn, "UPDATE items SET label = ? WHERE id > ?", ["z", 1])
        assert result.rows_affected == 2

    @pytest.mark.asyncio
    async def test_non_insert_has_no_inserted_id(self, conn):
        """Test UPDATE and DELETE do not report the rowid of an earlier INSERT."""
        await execute_mutation(conn, "INSERT INTO items (label) VALUES (?)", ("d",))
        updated = await execute_mutation(conn, "UPDATE items SET label = ? WHERE id = ?", ["z", 1])
        deleted = await execute_mutation(conn, "DELETE FROM items WHERE id = ?", (2,))
        assert updated == MutationResult(inserted_id=None, rows_affected=1)
        assert deleted == MutationResult(inserted_id=None, rows_affected=1)

    @pytest.mark.asyncio
    async def test_ignored_insert_has_no_inserted_id(self, conn):
        """Test an INSERT that added no row reports no rowid."""
        result = await execute_mutation(conn, "INSERT OR IGNORE INTO items (id, label) VALUES (?, ?)", (1, "x"))
        assert result == MutationResult(inserted_id=None, rows_affected=0)

    @pytest.mark.asyncio
    async def test_ddl_reports_zero_rows(self, conn):
        """Test statements that change no rows report 0, not -1."""
        result = await execute_mutation(conn, "CREATE TABLE other (id INTEGER)")
        assert result.rows_affected == 0

    @pytest.mark.asyncio
    async def test_failure_raises_run_error(self, conn):
        """Test an engine failure raises RunError chained to the engine error."""
        logger = MagicMock()
        with pytest.raises(RunError) as exc_info:
            await execute_mutation(conn, "INSERT INTO items (nope) VALUES (?)", (1,), logger=logger)
        assert exc_info.value.engine_message == "table items has no column named nope"
        assert isinstance(exc_info.value.__cause__, aiosqlite.Error)
        logger.error.assert_called_once()


class TestExecuteRows:

    @pytest.mark.asyncio
    async def test_returns_records(self, conn):
        """Test rows come back as dictionaries in order."""
        rows = await execute_rows(conn, "SELECT id, label FROM items ORDER BY id")
        assert rows == [{"id": 1, "label": "a"}, {"id": 2, "label": "b"}, {"id": 3, "label": "c"}]

    @pytest.mark.asyncio
    async def test_no_match_returns_empty_list(self, conn):
        """Test an empty result is [] and never None."""
        assert await execute_rows(conn, "SELECT * FROM items WHERE id = ?", (99,)) == []

    @pytest.mark.asyncio
    async def test_failure_raises_all_error(self, conn):
        with pytest.raises(AllError) as exc_info:
            await execute_rows(conn, "SELECT * FROM missing")
        assert str(exc_info.value) == "SQL all error: no such table: missing"


class TestExecuteSingleRow:

    @pytest.mark.asyncio
    async def test_returns_first_record(self, conn):
        assert await execute_single_row(conn, "SELECT label FROM items ORDER BY id DESC") == {"label": "c"}

    @pytest.mark.asyncio
    async def test_no_row_returns_none(self, conn):
        """Test zero rows is None rather than an error."""
        assert await execute_single_row(conn, "SELECT * FROM items WHERE id = ?", (99,)) is None

    @pytest.mark.asyncio
    async def test_failure_raises_get_error(self, conn):
        with pytest.raises(GetError):
            await execute_single_row(conn, "SELECT * FROM items WHERE", ())


class TestStreamRows:

    @pytest.mark.asyncio
    async def test_yields_every_record(self, conn):
        """Test the iterator replays the whole result set."""
        labels = [row["label"] async for row in stream_rows(conn, "SELECT label FROM items ORDER BY id")]
        assert labels == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_result_is_buffered_before_first_yield(self, conn):
        """Test rows inserted after iteration started are not seen."""
        iterator = stream_rows(conn, "SELECT label FROM items ORDER BY id")
        first = await iterator.__anext__()
        await conn.execute("INSERT INTO items (label) VALUES ('late')")
        rest = [row async for row in iterator]
        assert [first["label"]] + [row["label"] for row in rest] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_failure_raises_all_error_on_iteration(self, conn):
        iterator = stream_rows(conn, "SELECT * FROM missing")
        with pytest.raises(AllError):
            await iterator.__anext__()


class TestTryQuery:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", ["run", "mutation", Mutation()])
    async def test_mutation_kinds(self, conn, kind):
        result = await try_query(conn, "DELETE FROM items WHERE id = ?", (1,), kind)
        assert isinstance(result, MutationResult)

    @pytest.mark.asyncio
    async def test_rows_is_default(self, conn):
        assert len(await try_query(conn, "SELECT * FROM items")) == 3

    @pytest.mark.asyncio
    async def test_single_row_kind(self, conn):
        assert await try_query(conn, "SELECT label FROM items WHERE id = ?", (2,), "single-row") == {"label": "b"}

    @pytest.mark.asyncio
    async def test_stream_kind_returns_iterator(self, conn):
        iterator = await try_query(conn, "SELECT id FROM items", kind="each")
        assert [row["id"] async for row in iterator] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_log_flag(self, conn):
        """Test log=True logs the statement before executing it."""
        logger = MagicMock()
        await try_query(conn, "SELECT 1", log=True, logger=logger)
        logger.info.assert_called_once_with("Executing query: SELECT 1 | Params: None")

    @pytest.mark.asyncio
    async def test_unknown_kind(self, conn):
        with pytest.raises(ValueError):
            await try_query(conn, "SELECT 1", kind="cursor")
