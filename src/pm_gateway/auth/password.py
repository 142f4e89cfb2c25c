"""Password hashing utilities using bcrypt.

Uses the ``bcrypt`` library directly (>=4.0); passlib is unmaintained and
incompatible with bcrypt >=4.
"""

import bcrypt

_ROUNDS = 12


def hash_password(plain: str) -> str:
    """Hash a plain-text password with bcrypt. Returns a utf-8 hash string."""
    hashed_bytes: bytes = bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(_ROUNDS))
    return hashed_bytes.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plain-text password against a bcrypt hash."""
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
