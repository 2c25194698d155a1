import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.exceptions import NotFoundError
from schemas.token import RefreshTokenRequest, RefreshTokenResponse, RevokeTokenResponse
from services.user.auth import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/auth', tags=['Token'])

@router.post('/refresh', response_model=RefreshTokenResponse)
async def refresh_access_token(
    token_in: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Refresh Token 교체 (사용한 토큰은 즉시 폐기)
    """
    try:
        return await auth_service.refresh(db, token_in.refresh_token)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )

@router.post('/revoke', response_model=RevokeTokenResponse)
async def revoke_refresh_token(
    token_in: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Refresh Token 폐기 (대체 토큰 없음)
    없거나 이미 비활성인 토큰이면 revoked=false
    """
    revoked = await auth_service.revoke(db, token_in.refresh_token)
    return RevokeTokenResponse(revoked=revoked)
