"""SQLite connection + schema initialisation."""
from __future__ import annotations
import os
import sqlite3
from typing import Optional

from masterygate.core import config

_MIGRATIONS_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "migrations")


def get_connection(database_path: Optional[str] = None) -> sqlite3.Connection:
    conn = sqlite3.connect(database_path or config.DATABASE_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def init_db(database_path: Optional[str] = None) -> None:
    """Run all migration SQL files against the database."""
    database_path = database_path or config.DATABASE_PATH
    directory = os.path.dirname(database_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    migration_file = os.path.join(_MIGRATIONS_DIR, "001_init.sql")
    with open(migration_file, "r", encoding="utf-8") as f:
        sql = f.read()
    conn = get_connection(database_path)
    try:
        conn.executescript(sql)
        conn.commit()
    finally:
        conn.close()
