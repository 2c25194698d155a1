import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from core.database import get_db
from core.security.dependencies import get_current_user
from models.user import User
from schemas.token import RefreshTokenSession
from schemas.user import MessageResponse
from services.user.auth import auth_service
from services.user.token import token_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["User-Profile"],
    dependencies=[Depends(get_current_user)]
)

@router.get("/me/sessions", response_model=List[RefreshTokenSession])
async def read_my_sessions(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """내 Refresh Token 발급/폐기 이력 (최근 순)"""
    records = await token_service.list_for_user(db, current_user.user_id)
    return [
        RefreshTokenSession(
            id=record.id,
            created_at=record.created_at,
            expires_at=record.expires_at,
            revoked_at=record.revoked_at,
            reason_revoked=record.reason_revoked,
            active=record.is_active,
        )
        for record in records
    ]

@router.delete("/me", response_model=MessageResponse)
async def delete_users_me(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """회원 탈퇴 (토큰, 즐겨찾기 함께 삭제)"""
    await auth_service.delete_account(db, current_user.user_id)
    return MessageResponse(message="Account deleted")
