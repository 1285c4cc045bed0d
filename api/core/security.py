"""
Secret hashing helpers.
"""

from __future__ import annotations

import bcrypt

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


class SecurityError(RuntimeError):
    pass


def hash_secret(plain_secret: str) -> str:
    secret = (plain_secret or "").encode("utf-8")[:BCRYPT_MAX_BYTES]
    if not secret:
        raise SecurityError("Secret is empty.")
    return bcrypt.hashpw(secret, bcrypt.gensalt()).decode("utf-8")


def verify_secret(plain_secret: str, secret_hash: str) -> bool:
    secret = (plain_secret or "").encode("utf-8")[:BCRYPT_MAX_BYTES]
    hashed = (secret_hash or "").encode("utf-8")
    if not secret or not hashed:
        return False
    try:
        return bcrypt.checkpw(secret, hashed)
    except ValueError:
        return False
