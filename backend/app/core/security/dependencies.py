from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security.token import verify_access_token
from models.user import User
from schemas.token import TokenData
from services.user.general import user_general_service

bearer_scheme = HTTPBearer(auto_error=False)

async def get_token_data(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenData:
    """
    Authorization: Bearer 헤더의 Access Token 검증
    서버는 액세스 토큰을 저장하지 않으므로 서명/만료만으로 판단
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    token_data = verify_access_token(credentials.credentials)
    if token_data is None or not token_data.user_id:
        raise credentials_exception

    return token_data

async def get_current_user_id(token_data: TokenData = Depends(get_token_data)) -> str:
    return token_data.user_id

async def get_current_user(
    token_data: TokenData = Depends(get_token_data),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Access Token을 검증하고 현재 사용자를 반환하는 의존성
    """
    user = await user_general_service.get_user_by_id(db, user_id=token_data.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
