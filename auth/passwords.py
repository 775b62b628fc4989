"""Password hashing and strength checks backed by bcrypt."""

from __future__ import annotations

import logging
import re
import secrets
import string
from dataclasses import dataclass, field

import bcrypt

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 12
MIN_LENGTH = 8
MAX_LENGTH = 128

# bcrypt only consumes the first 72 bytes of its input.
_BCRYPT_MAX_BYTES = 72

SYMBOLS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"
_SYMBOL_PATTERN = re.compile("[" + re.escape(SYMBOLS) + "]")

COMMON_PASSWORDS = frozenset(
    {
        "password",
        "123456",
        "123456789",
        "qwerty",
        "abc123",
        "password123",
        "admin",
        "letmein",
        "welcome",
        "monkey",
    }
)


@dataclass
class StrengthResult:
    """Outcome of :func:`check_strength`."""

    valid: bool
    errors: list[str] = field(default_factory=list)


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class PasswordHasher:
    """Salted one-way hashing with a fixed work factor."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = int(rounds)

    def hash(self, password: str) -> str:
        """Return a modular-crypt bcrypt hash for ``password``."""

        if not password:
            raise ValueError("Password must not be empty.")
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("ascii")

    def verify(self, password: str, password_hash: str | None) -> bool:
        """Return True when ``password`` matches ``password_hash``.

        A missing or malformed hash, or a non-string input, is reported as a
        mismatch.
        """

        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("ascii"))
        except (AttributeError, ValueError, TypeError, UnicodeEncodeError) as error:
            logger.warning("Password verification failed: %s", error)
            return False


def check_strength(password: str) -> StrengthResult:
    """Validate ``password`` against every strength rule and collect violations."""

    if password is not None and not isinstance(password, str):
        return StrengthResult(valid=False, errors=["Password must be a string."])

    errors: list[str] = []
    password = password or ""

    if len(password) < MIN_LENGTH:
        errors.append(f"Password must be at least {MIN_LENGTH} characters long.")
    if len(password) > MAX_LENGTH:
        errors.append(f"Password must be at most {MAX_LENGTH} characters long.")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter.")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter.")
    if not re.search(r"\d", password):
        errors.append("Password must contain at least one digit.")
    if not _SYMBOL_PATTERN.search(password):
        errors.append("Password must contain at least one special character.")
    if password.lower() in COMMON_PASSWORDS:
        errors.append("Password is too common, please choose a stronger one.")

    return StrengthResult(valid=not errors, errors=errors)


def generate_password(length: int = 12) -> str:
    """Return a random password with at least one character of each class."""

    if length < 4:
        raise ValueError("Generated passwords need at least 4 characters.")

    pools = (string.ascii_uppercase, string.ascii_lowercase, string.digits, SYMBOLS)
    characters = [secrets.choice(pool) for pool in pools]
    alphabet = "".join(pools)
    characters.extend(secrets.choice(alphabet) for _ in range(length - len(pools)))
    secrets.SystemRandom().shuffle(characters)
    return "".join(characters)
