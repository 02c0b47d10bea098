"""
Example 01: Basic Query Execution

This example demonstrates binding parameters and reading rows with row_bind's Engine.
"""

from row_bind import Engine, ConnectionConfig
import tempfile
import sqlite3
from pathlib import Path


def main():
    # Create a temporary database
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    # Set up the database with some test data
    conn = sqlite3.connect(db_path)
    conn.execute("""
        CREATE TABLE users (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            active INTEGER DEFAULT 1
        )
    """)
    conn.commit()
    conn.close()

    config = ConnectionConfig(driver="sqlite", database=db_path)
    engine = Engine.from_config(config)

    print("=== Basic Query Execution ===\n")

    # run: write statements, parameters referenced as @name
    insert = "INSERT INTO users (name, email, active) VALUES (@name, @email, @active)"
    engine.run(insert, {"name": "Alice", "email": "alice@example.com", "active": 1})
    engine.run(insert, {"name": "Bob", "email": "bob@example.com", "active": 1})
    engine.run(insert, {"name": "Charlie", "email": "charlie@example.com", "active": 0})

    # Parameters the query does not reference are left out
    updated = engine.run(
        "UPDATE users SET active = 1 WHERE name = @name",
        {"name": "Charlie", "email": "unused@example.com"},
    )
    print(f"run result: {updated} row(s) updated\n")

    # execute: an open source over the result rows
    source = engine.execute(
        "SELECT id, name, email FROM users WHERE active = @active", {"active": 1}
    )
    try:
        print(f"columns: {source.field_names()}")
        while (row := source.next_row()) is not None:
            print(f"  - {row[1]} ({row[2]})")
    finally:
        source.release()
    print()

    # scalar: a single value
    count = engine.scalar("SELECT COUNT(*) FROM users")
    print(f"scalar result: {count} total users\n")

    # Clean up
    engine.close()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()
