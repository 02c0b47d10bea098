"""
Example 02: Model Mapping

This example demonstrates mapping query results to dataclasses, Pydantic models
and repositories, and binding objects as query parameters.
"""

from row_bind import Engine, ConnectionConfig, Repository, mappable, get_valid_fields
from dataclasses import dataclass, field
from datetime import date
from typing import Optional
from pydantic import BaseModel
import tempfile
import sqlite3
from pathlib import Path


@mappable(ignore=["tags"])
@dataclass
class UserDataclass:
    """User model using dataclass"""
    id: int
    name: str
    email: str
    active: bool
    joined: Optional[date] = None
    tags: list = field(default_factory=list)


class UserPydantic(BaseModel):
    """User model using Pydantic"""
    id: int
    name: str
    email: str
    active: bool


class UserRepository(Repository[UserDataclass]):
    def active(self) -> list[UserDataclass]:
        return self.all("SELECT * FROM users WHERE active = @active", {"active": 1})


def main():
    # Set up database
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    conn = sqlite3.connect(db_path)
    conn.execute("""
        CREATE TABLE users (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            active INTEGER DEFAULT 1,
            joined TEXT
        )
    """)
    conn.commit()
    conn.close()

    config = ConnectionConfig(driver="sqlite", database=db_path)
    engine = Engine.from_config(config)

    print("=== Model Mapping ===\n")

    # Bind objects: every valid field referenced in the query is bound
    print(f"Valid fields: {[f.name for f in get_valid_fields(UserDataclass)]}\n")
    insert = (
        "INSERT INTO users (id, name, email, active, joined) "
        "VALUES (@id, @name, @email, @active, @joined)"
    )
    engine.run(insert, {"id": 1, "name": "Alice", "email": "alice@example.com",
                        "active": 1, "joined": "2023-06-01"})
    engine.run(insert, {"id": 2, "name": "Bob", "email": "bob@example.com",
                        "active": 0, "joined": None})

    # Map to dataclass
    print("1. Dataclass Mapping:")
    user = engine.first(UserDataclass, "SELECT * FROM users WHERE id = @id", {"id": 1})
    print(f"   Type: {type(user).__name__}")
    print(f"   Data: {user}")
    print(f"   Access: user.joined = {user.joined!r}\n")

    # Map to Pydantic model
    print("2. Pydantic Model Mapping:")
    users = engine.all(UserPydantic, "SELECT * FROM users ORDER BY id")
    print(f"   Count: {len(users)} users")
    for u in users:
        print(f"   - {u.name}: {u.email} (active={u.active})")
    print()

    # Repository
    print("3. Repository:")
    repo = UserRepository(engine, UserDataclass)
    for u in repo.active():
        print(f"   - {u.name} (key {repo.primary_key.name}={repo.key_of(u)})")
    print()

    # Clean up
    engine.close()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()
