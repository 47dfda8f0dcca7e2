"""Password hashing strategies."""

from __future__ import annotations

import bcrypt

from authkeeper.domain.users.repositories import PasswordHasher
from authkeeper.shared.errors import HashingError

# bcrypt ignores everything past the first 72 bytes of input
BCRYPT_MAX_BYTES = 72
DEFAULT_ROUNDS = 12


class BcryptPasswordHasher(PasswordHasher):
    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        if not 4 <= rounds <= 31:
            raise ValueError(f"bcrypt rounds must be within 4..31, got {rounds}")
        self._rounds = rounds

    @property
    def rounds(self) -> int:
        return self._rounds

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:BCRYPT_MAX_BYTES]

    def hash(self, password: str) -> str:
        if not password:
            raise HashingError("empty_password")
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(self._encode(password), salt).decode("ascii")

    def verify(self, password: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(self._encode(password), hashed.encode("ascii"))
        except (ValueError, UnicodeEncodeError) as exc:
            raise HashingError("malformed_hash") from exc

    def needs_rehash(self, hashed: str) -> bool:
        # $2b$12$<22 salt chars><31 digest chars>
        parts = hashed.split("$")
        if len(parts) != 4 or not parts[2].isdigit():
            return True
        return int(parts[2]) != self._rounds
