"""Argon2 password hashing."""

from typing import Optional

from argon2 import PasswordHasher
from argon2 import exceptions as argon_exc


password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return password_hasher.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return password_hasher.verify(password_hash, password)
    except (argon_exc.VerifyMismatchError, argon_exc.InvalidHashError, argon_exc.VerificationError):
        return False
