"""Password hashing for credential records (bcrypt with SHA-256 pre-hash).

Bcrypt truncates inputs at 72 bytes; pre-hashing with SHA-256 gives a
fixed-length input so long passwords are not silently truncated.
"""

import base64
import hashlib

import bcrypt


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash of password."""
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Return True if password matches hashed. Malformed hashes never match."""
    try:
        return bool(bcrypt.checkpw(_prehash(password), hashed.encode("utf-8")))
    except (ValueError, TypeError, AttributeError):
        return False
