"""
Security utilities: password hashing, session tokens and legacy JWT decoding.
"""
import asyncio
import secrets
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from ..db.models import PrincipalKind

SESSION_TOKEN_BYTES = 32

TOKEN_PREFIXES: Dict[PrincipalKind, str] = {
    PrincipalKind.ADMIN: "admin_",
    PrincipalKind.FAMILY_MEMBER: "member_",
}


class PasswordHasher:
    """bcrypt password hashing with a configurable cost factor.

    bcrypt is deliberately slow, so the async helpers run it in a worker
    thread to keep the event loop free for other requests.
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds
        self.context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        """Generate a password hash."""
        return self.context.hash(password)

    def verify(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        """Verify a password against a hash."""
        if not hashed_password:
            return False
        try:
            return self.context.verify(plain_password, hashed_password)
        except ValueError:
            # Malformed or unknown hash format
            return False

    async def hash_async(self, password: str) -> str:
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        return await asyncio.to_thread(self.verify, plain_password, hashed_password)


def generate_session_token(kind: PrincipalKind) -> str:
    """Generate a prefixed session token: ``admin_<64 hex>`` or ``member_<64 hex>``."""
    return TOKEN_PREFIXES[kind] + secrets.token_hex(SESSION_TOKEN_BYTES)


def token_kind(token: str) -> Optional[PrincipalKind]:
    """Return the principal kind encoded in the token prefix, or None for legacy tokens."""
    for kind, prefix in TOKEN_PREFIXES.items():
        if token.startswith(prefix):
            return kind
    return None


def generate_temporary_password() -> str:
    """Random 16-hex-character password handed out by admin resets."""
    return secrets.token_hex(8)


def decode_legacy_jwt(token: str, secret_key: str, algorithm: str = "HS256") -> Optional[int]:
    """Decode a legacy admin bearer JWT and return the admin id it names.

    Returns None when the token is invalid, expired or carries no id claim.
    """
    try:
        payload: Dict[str, Any] = jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError:
        return None
    admin_id = payload.get("userId") or payload.get("id")
    try:
        return int(admin_id) if admin_id is not None else None
    except (TypeError, ValueError):
        return None


def create_legacy_jwt(admin_id: int, secret_key: str, algorithm: str = "HS256", **claims: Any) -> str:
    """Encode a legacy admin JWT. Used by tooling and tests."""
    to_encode = {"userId": admin_id, **claims}
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


__all__ = [
    "PasswordHasher", "generate_session_token", "token_kind", "TOKEN_PREFIXES",
    "generate_temporary_password", "decode_legacy_jwt", "create_legacy_jwt",
]
