# tests/conftest.py
import pytest
import pytest_asyncio
from ..connection import SQL3

USERS_SCHEMA = {
    "id": "INTEGER PRIMARY KEY AUTOINCREMENT",
    "name": "TEXT NOT NULL",
    "email": "TEXT UNIQUE",
    "age": "INTEGER",
}


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "test.db")


@pytest_asyncio.fixture
async def db(db_path):
    """An open SQL3 connection on a fresh on-disk database."""
    database = SQL3(db_path)
    await database.connect()
    yield database
    await database.close()


@pytest_asyncio.fixture
async def users_db(db):
    """25 users: user1..user25, ages cycling through 20..24."""
    await db.create_table("users", USERS_SCHEMA)
    for i in range(1, 26):
        await db.insert("users", {"name": f"user{i}", "email": f"user{i}@example.com", "age": 20 + i % 5})
    return db
