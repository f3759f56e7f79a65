"""Password hashing and one-time token helpers."""

import hashlib
import secrets

from pwdlib import PasswordHash

# pwdlib is the modern, recommended way (Argon2 by default)
password_hash = PasswordHash.recommended()

# Verified against when the username is unknown, so timing does not reveal it
DUMMY_HASH = password_hash.hash("taiwanstay-timing-guard")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check whether a plaintext password matches a stored hashed password.

    Returns:
        True if the plaintext password matches the hashed password, False otherwise.
    """
    return password_hash.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a plaintext password using the recommended hashing algorithm (Argon2).

    Parameters:
        password (str): Plaintext password to hash.

    Returns:
        str: Password hash suitable for secure storage.
    """
    return password_hash.hash(password)


def generate_reset_token() -> str:
    """URL-safe password reset token (64 characters), sent to the user by email."""
    return secrets.token_urlsafe(48)


def get_token_hash(token: str) -> str:
    """
    SHA-256 digest of a one-time token.

    Reset tokens are random and high-entropy, so a fast digest is enough and
    lets the stored value be looked up directly.
    """
    return hashlib.sha256(token.encode()).hexdigest()
