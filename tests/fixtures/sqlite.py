import sqlite3

import pytest


@pytest.fixture
def sqlite_conn():
    """Create an in-memory SQLite database for testing"""
    conn = sqlite3.connect(':memory:')

    conn.executescript("""
    CREATE TABLE items (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL
    );
    CREATE TABLE orders (
        order_id INTEGER PRIMARY KEY,
        item_id INTEGER NOT NULL,
        total REAL NOT NULL,
        paid INTEGER NOT NULL
    );
    CREATE TABLE people (
        id INTEGER PRIMARY KEY,
        name TEXT,
        city TEXT,
        zip_code TEXT,
        born TEXT,
        tags TEXT
    );
    INSERT INTO items (id, name) VALUES (1, 'a'), (2, 'b'), (3, 'c');
    INSERT INTO orders (order_id, item_id, total, paid) VALUES
        (10, 1, 9.5, 1),
        (11, 2, 20.0, 0);
    """)

    yield conn
    conn.close()
