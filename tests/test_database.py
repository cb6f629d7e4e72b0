from __future__ import annotations

import asyncio

from sqlalchemy import create_engine, inspect

from app.database import Database


def test_create_all_creates_account_tables(tmp_path) -> None:
    """Creating the schema should provision users and their sessions."""

    database_path = tmp_path / "accounts.db"

    database = Database(f"sqlite+aiosqlite:///{database_path}")
    asyncio.run(database.create_all())
    asyncio.run(database.dispose())

    inspector_engine = create_engine(f"sqlite:///{database_path}")
    try:
        inspector = inspect(inspector_engine)
        tables = set(inspector.get_table_names())
        session_columns = {column["name"] for column in inspector.get_columns("user_sessions")}
    finally:
        inspector_engine.dispose()

    assert {"users", "user_sessions"} <= tables
    assert {"token", "user_id", "expires_at"} <= session_columns
