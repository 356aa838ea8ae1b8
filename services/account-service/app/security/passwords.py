"""Password hashing used when checking login credentials."""

from __future__ import annotations

import bcrypt


class BcryptPasswordEncoder:
    """``PasswordEncoder`` backed by bcrypt with a per-hash random salt."""

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def encode(self, raw_password: str) -> str:
        return bcrypt.hashpw(raw_password.encode("utf-8"), bcrypt.gensalt(self._rounds)).decode("utf-8")

    def matches(self, raw_password: str, encoded_password: str) -> bool:
        try:
            return bcrypt.checkpw(raw_password.encode("utf-8"), encoded_password.encode("utf-8"))
        except ValueError:
            # malformed stored hash
            return False
