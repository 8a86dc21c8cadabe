"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The work factor (rounds=12) takes tens of milliseconds per verify on
modern hardware; tests turn it down via DEVTASKS_BCRYPT_ROUNDS.
"""

from functools import lru_cache

import bcrypt

BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with bcrypt.

    Learn: bcrypt includes a random salt automatically and produces
    hashes starting with "$2b$".
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash. Malformed hashes never verify."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=8)
def dummy_hash(rounds: int = 12) -> str:
    """A throwaway hash with the same cost as real ones.

    Login verifies against this when the email is unknown, so "no such
    user" costs the same as "wrong password".
    """
    return hash_password("devtasks-timing-equalizer", rounds=rounds)
