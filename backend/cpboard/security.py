from __future__ import annotations
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
import jwt
from cpboard.config import settings

JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALG = "HS256"
ACCESS_TTL_MIN = int(os.getenv("ACCESS_TTL_MIN", "15"))


@dataclass(frozen=True)
class Identity:
    """Who the bearer token says is calling."""
    sub: str
    username: str | None = None
    role: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == settings.admin_role or self.username == settings.admin_username


def make_access_token(sub: str, username: str | None = None, role: str | None = None, ttl_min: int = ACCESS_TTL_MIN) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "type": "access",
        "iat": now.timestamp(),
        "exp": int((now + timedelta(minutes=ttl_min)).timestamp()),
    }
    if username:
        payload["username"] = username
    if role:
        payload["role"] = role
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)


def decode_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])


def identity_from_claims(data: dict[str, Any]) -> Identity:
    return Identity(sub=str(data["sub"]), username=data.get("username"), role=data.get("role"))
