from __future__ import annotations
import secrets
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from habitboard.config import settings
from habitboard.db import get_session
from habitboard.models.user import User
from habitboard.services.store import SqlProgressStore
from habitboard.services.users import get_user

security = HTTPBearer(auto_error=False)

async def require_admin(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> None:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing admin token")
    if not secrets.compare_digest(credentials.credentials, settings.admin_token):
        raise HTTPException(status_code=403, detail="Invalid admin token")

async def get_store(session: AsyncSession = Depends(get_session)) -> SqlProgressStore:
    return SqlProgressStore(session)

def check_user_id(user_id: int) -> int:
    if user_id <= 0:
        raise HTTPException(status_code=400, detail="Invalid user id format")
    return user_id

async def load_approved_user(session: AsyncSession, user_id: int) -> User:
    check_user_id(user_id)
    user = await get_user(session, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.status != "approved":
        raise HTTPException(status_code=403, detail="User not approved yet")
    return user

async def get_approved_user(user_id: int, session: AsyncSession = Depends(get_session)) -> User:
    """Path dependency: the user must exist and be approved."""
    return await load_approved_user(session, user_id)
