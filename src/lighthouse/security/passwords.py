"""Password hashing with argon2id via ``argon2-cffi``.

Cost parameters are the library defaults. Hashes are PHC-format
strings, so stored values carry their own parameters.

Usage::

    from lighthouse.security.passwords import hash_password, verify_password

    hashed = hash_password("my-password")
    ok = verify_password("my-password", hashed)
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a password. Raises ``ValueError`` for an empty password."""
    if not password:
        msg = "Password must not be empty"
        raise ValueError(msg)
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check *password* against a stored hash.

    Returns False for empty input, a wrong password, or a hash that
    is not a valid argon2 string. Never raises.
    """
    if not password or not password_hash:
        return False
    try:
        return _hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def needs_rehash(password_hash: str) -> bool:
    """True when *password_hash* was made with weaker-than-current parameters."""
    try:
        return _hasher.check_needs_rehash(password_hash)
    except InvalidHashError:
        return True
