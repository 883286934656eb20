"""
sessionguard.auth.passwords

Password hashing (bcrypt, used directly without a passlib wrapper).
"""

from __future__ import annotations

import bcrypt


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        return False


# Verified against on unknown usernames so login timing does not reveal which
# usernames exist.
DUMMY_HASH: str = hash_password("sessionguard_timing_dummy")
