"""
Password hashing helpers (argon2 via argon2-cffi).

Digests are PHC strings ($argon2id$v=19$m=...,t=...,p=...$salt$hash), so
verification needs only the digest and the candidate password.
"""
from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

ph = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2.

    Raises argon2.exceptions.HashingError if hashing itself fails.
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a plaintext password using argon2. A mismatch, or a digest
    that cannot be parsed, is False rather than an exception.
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def password_needs_rehash(password_hash: str) -> bool:
    """True when the digest was made with other cost parameters than ours."""
    return ph.check_needs_rehash(password_hash)
