from __future__ import annotations
import uuid
import jwt
from fastapi import Depends, HTTPException, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from scavhunt.config import settings
from scavhunt.db import get_session
from scavhunt.security import decode_token, admin_key_matches
from scavhunt.models.hunt import Team
from scavhunt.services.obscure import Obscurer

security = HTTPBearer()

async def get_current_team(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: AsyncSession = Depends(get_session)
) -> Team:
    token = credentials.credentials
    try:
        data = decode_token(token)
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if data.get("type") != "team":
        raise HTTPException(status_code=401, detail="Wrong token type")
    team = await session.get(Team, _parse_uuid(data.get("sub")))
    if not team:
        raise HTTPException(status_code=401, detail="Team not found")
    return team

async def require_admin(x_admin_key: str | None = Header(default=None, alias="X-Admin-Key")) -> None:
    if not admin_key_matches(x_admin_key):
        raise HTTPException(status_code=403, detail="Admin access required")

def get_obscurer() -> Obscurer:
    return Obscurer(settings.obscure_key)

def _parse_uuid(value) -> uuid.UUID:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token")
