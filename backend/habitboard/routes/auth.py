from __future__ import annotations
from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from habitboard.auth_deps import check_user_id
from habitboard.db import get_session
from habitboard.schemas.user import AccessCheck, RegisterRequest, UserPublic
from habitboard.services.users import get_user, register_user

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", status_code=201, response_model=UserPublic)
async def register(payload: RegisterRequest, response: Response, session: AsyncSession = Depends(get_session)):
    user, created = await register_user(session, payload)
    if not created:
        response.status_code = 200
    return UserPublic.model_validate(user)

@router.get("/check/{user_id}", response_model=AccessCheck)
async def check(user_id: int, session: AsyncSession = Depends(get_session)):
    check_user_id(user_id)
    user = await get_user(session, user_id)
    if not user:
        return AccessCheck(exists=False, can_access=False)
    return AccessCheck(exists=True, status=user.status, can_access=user.status == "approved")
