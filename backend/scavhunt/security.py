from __future__ import annotations
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any
import jwt
from scavhunt.config import settings

JWT_ALG = "HS256"

def make_team_token(team_id: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": team_id,
        "type": "team",
        "iat": now.timestamp(),
        "exp": int((now + timedelta(minutes=settings.team_token_ttl_min)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALG)

def decode_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALG])

def admin_key_matches(candidate: str | None) -> bool:
    if not candidate or not settings.admin_api_key:
        return False
    return secrets.compare_digest(candidate, settings.admin_api_key)
