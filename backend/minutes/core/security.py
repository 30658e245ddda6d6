# minutes/core/security.py
"""
Security module for authentication and secrets at rest.
Handles password hashing, JWT token creation/validation and the symmetric
encryption used for third-party API keys stored in the database.
"""
import os
import base64
import hashlib
import datetime as dt
import jwt  # PyJWT
from cryptography.fernet import Fernet, InvalidToken
from passlib.context import CryptContext
from dotenv import load_dotenv
from pathlib import Path

# Load environment variables from project root
ENV_PATH = Path(__file__).resolve().parents[3] / ".env"
load_dotenv(dotenv_path=ENV_PATH)

# Password hashing context
# Argon2 is a modern, secure password hashing algorithm
pwd_context = CryptContext(
    schemes=["argon2"],  # Use Argon2 for password hashing
    deprecated="auto",   # Automatically handle deprecated schemes
)

# JWT configuration
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret")  # Secret key for JWT signing (use strong secret in production)
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))  # Token expiration time in minutes
JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)

# Deployment-wide secret for API keys at rest (defaults to the JWT secret)
ENCRYPTION_SECRET = os.getenv("ENCRYPTION_KEY") or JWT_SECRET

MASK = "••••••••"

def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)

def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plain text password against a hashed password."""
    return pwd_context.verify(plain, hashed)

def create_access_token(user_id: str, role: str) -> str:
    """
    Create a JWT access token for user authentication.

    The token carries the user ID and role so handlers can authorize without
    an extra query.

    Token payload includes:
        - sub: Subject (user ID)
        - role: User role for authorization
        - iat: Issued at timestamp
        - exp: Expiration timestamp
    """
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sub": user_id,
        "role": role,
        "iat": now,
        "exp": now + dt.timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)

def decode_access_token(token: str) -> dict:
    """
    Decode and validate a JWT access token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or malformed
    """
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])

# ------------------------------------------------------------------------------
# Secrets at rest
# ------------------------------------------------------------------------------
def _fernet(secret: str | None = None) -> Fernet:
    # Fernet wants 32 url-safe base64 bytes; derive them from any secret string
    digest = hashlib.sha256((secret or ENCRYPTION_SECRET).encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))

def encrypt(plain: str, secret: str | None = None) -> str:
    """Encrypt a secret value; returns a Fernet token (str)."""
    return _fernet(secret).encrypt(plain.encode("utf-8")).decode("ascii")

def decrypt(token: str, secret: str | None = None) -> str:
    """
    Decrypt a value produced by :func:`encrypt`.

    Raises:
        cryptography.fernet.InvalidToken: If the token was tampered with or
            encrypted under a different secret
    """
    return _fernet(secret).decrypt(token.encode("ascii")).decode("utf-8")

def mask_api_key(value: str) -> str:
    """Show only the first and last 4 characters of a key."""
    if len(value) <= 8:
        return MASK
    return f"{value[:4]}••••{value[-4:]}"

__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_access_token",
    "encrypt",
    "decrypt",
    "mask_api_key",
    "InvalidToken",
    "JWT_SECRET",
    "ACCESS_TOKEN_EXPIRE_MINUTES",
]
