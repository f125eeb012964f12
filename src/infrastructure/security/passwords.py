from __future__ import annotations

import os

import bcrypt


class PasswordHasher:
    """bcrypt wrapper; only the hash string is ever stored."""

    def __init__(self, rounds: int | None = None) -> None:
        self.rounds = rounds or int(os.getenv("BCRYPT_ROUNDS", "12"))

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash.
            return False
