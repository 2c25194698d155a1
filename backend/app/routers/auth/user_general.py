import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.exceptions import NotFoundError
from core.security.dependencies import get_current_user_id
from schemas.user import AuthResponse, UserCreate, UserLogin, UserProfile, MessageResponse
from services.user.auth import auth_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix='/auth', tags=['User-General'])

@router.post("/register", response_model=AuthResponse)
async def register_user(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    회원가입 후 바로 Access/Refresh Token 발급
    """
    return await auth_service.register(
        db,
        email=user_in.email,
        password=user_in.password,
        username=user_in.username,
    )

@router.post("/login", response_model=AuthResponse)
async def login_for_access_token(
    user_in: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """
    이메일/비밀번호 로그인
    """
    return await auth_service.login(db, email=user_in.email, password=user_in.password)

@router.post("/logout", response_model=MessageResponse)
async def logout(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """
    모든 기기에서 로그아웃 (활성 Refresh Token 전부 폐기)
    """
    try:
        await auth_service.logout(db, user_id)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Logout failed"
        )
    return MessageResponse(message="Logged out")

@router.get("/me", response_model=UserProfile)
async def read_current_user(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """현재 로그인된 사용자 정보 + 새 Access Token"""
    return await auth_service.get_current_user(db, user_id)
