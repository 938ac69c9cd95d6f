"""Password hashing, session tokens, and one-way transforms of caller identity."""

import hashlib
import hmac
import re
import secrets

import bcrypt

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Input limits for registration (names, email, password).
NAME_MIN_LEN = 1
NAME_MAX_LEN = 100
EMAIL_MAX_LEN = 254
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# Symbols accepted toward the "one symbol" password rule.
PASSWORD_SYMBOLS = "!@#$%^&*()-_=+[]{};:,.?/~`|<>'\"\\"

# 32 random bytes -> 256-bit session token.
SESSION_TOKEN_BYTES = 32

_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"\d")
_SYMBOL = re.compile("[" + re.escape(PASSWORD_SYMBOLS) + "]")
_EMAIL = re.compile(r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)+$")


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash (constant-time in bcrypt)."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    """Syntactic check on an already-normalized email."""
    if not email or len(email) > EMAIL_MAX_LEN:
        return False
    return _EMAIL.match(email) is not None


def password_policy_errors(password: str) -> list[str]:
    """Return every policy violation for password (empty list means valid)."""
    if not isinstance(password, str):
        return ["Password must be a string"]
    errors: list[str] = []
    if len(password) < PASSWORD_MIN_LEN:
        errors.append(f"Password must be at least {PASSWORD_MIN_LEN} characters")
    if len(password) > PASSWORD_MAX_LEN:
        errors.append(f"Password must be at most {PASSWORD_MAX_LEN} characters")
    if not _LOWER.search(password):
        errors.append("Password must include at least 1 lowercase letter")
    if not _UPPER.search(password):
        errors.append("Password must include at least 1 uppercase letter")
    if not _DIGIT.search(password):
        errors.append("Password must include at least 1 number")
    if not _SYMBOL.search(password):
        errors.append("Password must include at least 1 symbol")
    return errors


def generate_session_token() -> str:
    """Return a new opaque, URL-safe session token. Only its hash is persisted."""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


def hash_session_token(token: str) -> str:
    # SHA-256 is fine for hashing high-entropy random tokens
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def hash_source_address(address: str | None, secret: str) -> str:
    """
    Keyed one-way transform of a caller's network address.

    Equal addresses map to equal digests (so rate limits can group on them) but the
    raw address cannot be recovered without the key.
    """
    value = (address or "unknown").strip().lower()
    return hmac.new(
        secret.encode("utf-8"), value.encode("utf-8"), hashlib.sha256
    ).hexdigest()


def device_fingerprint(
    user_agent: str | None,
    accept_language: str | None = None,
    accept_encoding: str | None = None,
) -> str:
    """Non-reversible fingerprint of the client from its request headers."""
    material = "|".join(
        (user_agent or "", accept_language or "", accept_encoding or "")
    )
    return hashlib.sha256(material.encode("utf-8")).hexdigest()
