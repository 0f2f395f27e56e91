"""
Security Primitives

Password hashing (salted scrypt) and bearer token signing (PyJWT). Both are
small replaceable services so the rest of the package only sees
hash/verify and sign/verify.
"""

import hashlib
import hmac
import secrets
from datetime import datetime, timezone, timedelta
from typing import Any, Dict, Optional

import jwt

from .exceptions import AuthError


class PasswordHasher:
    """Salted scrypt digests stored as ``salt$hexdigest``"""

    def __init__(self, n: int = 16384, r: int = 8, p: int = 1):
        self.n = n
        self.r = r
        self.p = p

    def _digest(self, password: str, salt: str) -> str:
        return hashlib.scrypt(
            password.encode(),
            salt=salt.encode(),
            n=self.n, r=self.r, p=self.p
        ).hex()

    def hash(self, password: str) -> str:
        salt = secrets.token_hex(16)
        return f"{salt}${self._digest(password, salt)}"

    def verify(self, password: str, digest: str) -> bool:
        if not digest or "$" not in digest:
            return False
        salt, expected = digest.split("$", 1)
        return hmac.compare_digest(self._digest(password, salt), expected)


class TokenService:
    """Issues and validates HS256 bearer tokens"""

    def __init__(self, secret: str, algorithm: str = "HS256", expiry_hours: int = 24):
        if not secret:
            raise ValueError("A token signing secret must be configured")
        self.secret = secret
        self.algorithm = algorithm
        self.expiry_hours = expiry_hours

    def sign(self, claims: Dict[str, Any]) -> str:
        now = datetime.now(timezone.utc)
        payload = dict(claims)
        payload["iat"] = now
        payload["exp"] = now + timedelta(hours=self.expiry_hours)
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthError("Token expired")
        except jwt.InvalidTokenError:
            raise AuthError("Invalid token")
        if not payload.get("sub"):
            raise AuthError("Invalid token")
        return payload


ADMIN_ROLE = "admin"


class Principal:
    """The verified identity behind a bearer token"""

    def __init__(self, subject: str, email: Optional[str] = None, role: Optional[str] = None):
        self.subject = subject
        self.email = email
        self.role = role

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    def to_claims(self) -> Dict[str, Any]:
        claims: Dict[str, Any] = {"sub": self.subject, "email": self.email}
        if self.role:
            claims["role"] = self.role
        return claims

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> 'Principal':
        return cls(subject=claims["sub"], email=claims.get("email"), role=claims.get("role"))

    def __repr__(self) -> str:
        return f"Principal(subject={self.subject!r}, role={self.role!r})"
