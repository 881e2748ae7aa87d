"""
Password Hashing

Stored format is `salt:derived`, both hex. The salt's hex text (not its
decoded bytes) is the scrypt salt, so hashes written by earlier
deployments of the service keep verifying.
"""

import hashlib
import hmac
import secrets


SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_DKLEN = 64
SCRYPT_MAXMEM = 64 * 1024 * 1024
SALT_BYTES = 16


def _derive(password: str, salt: str) -> bytes:
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=SCRYPT_DKLEN,
        maxmem=SCRYPT_MAXMEM,
    )


def hash_password(password: str) -> str:
    """Hash a password with a fresh random salt."""
    salt = secrets.token_hex(SALT_BYTES)
    return f"{salt}:{_derive(password, salt).hex()}"


def verify_password(password: str, stored_hash: str) -> bool:
    """
    Check a password against a stored hash in constant time.

    Returns False for a malformed stored hash instead of raising.
    """
    salt, _, expected_hex = (stored_hash or "").partition(":")
    if not salt or not expected_hex:
        return False

    try:
        expected = bytes.fromhex(expected_hex)
    except ValueError:
        return False
    if len(expected) != SCRYPT_DKLEN:
        return False

    return hmac.compare_digest(_derive(password, salt), expected)
