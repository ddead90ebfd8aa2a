from __future__ import annotations

import os
from typing import Any

import bcrypt

# "name:password:role" entries, comma separated
_DEFAULT_DEMO_USERS = "user:user123:user,admin:admin123:admin"


class UserDirectory:
    """Login table for the demo deployment, seeded from ``name:password:role`` entries."""

    def __init__(self, entries: str = "") -> None:
        self._users: dict[str, dict[str, Any]] = {}
        self.seed(entries)

    def seed(self, entries: str) -> None:
        """Replace the table. The password may itself contain ``:``."""
        users: dict[str, dict[str, Any]] = {}
        for entry in filter(None, (part.strip() for part in entries.split(","))):
            username, _, rest = entry.partition(":")
            password, _, role = rest.rpartition(":")
            if not (username and password and role):
                raise ValueError(f"Malformed user entry {entry!r}, expected name:password:role")
            users[username] = {
                "password_hash": bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode(),
                "role": role,
            }
        self._users = users

    def authenticate(self, username: str, password: str) -> dict[str, Any] | None:
        """Session payload ``{username, role}`` for valid credentials, else ``None``."""
        record = self._users.get(username)
        if record is None:
            return None
        if not bcrypt.checkpw(password.encode(), record["password_hash"].encode()):
            return None
        return {"username": username, "role": record["role"]}


directory = UserDirectory(os.environ.get("MEALRANK_DEMO_USERS", _DEFAULT_DEMO_USERS))
authenticate = directory.authenticate
