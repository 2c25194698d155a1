import base64
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Iterable
from jose import JWTError, jwt

from core.config import settings, ensure_jwt_configured
from core.time import utcnow
from schemas.token import TokenData

REFRESH_TOKEN_BYTES = 64

def access_token_lifetime() -> timedelta:
    return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

def create_access_token(
    user_id: str,
    username: str,
    email: str,
    roles: Iterable[str],
    now: datetime | None = None,
) -> str:
    """
    Access Token (JWT) 생성
    sub는 이메일, uid 클레임에 사용자 ID
    """
    ensure_jwt_configured()

    issued_at = now or utcnow()
    expire = issued_at + access_token_lifetime()

    to_encode = {
        "sub": email,
        "jti": str(uuid.uuid4()),
        "uid": user_id,
        "username": username,
        "email": email,
        "roles": sorted(set(roles)),
        "iat": int(issued_at.timestamp()),
        "exp": int(expire.timestamp()),
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
    }
    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt

def create_refresh_token() -> str:
    """
    Refresh Token (64바이트 난수, base64) 생성
    """
    return base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")

def verify_access_token(token: str) -> TokenData | None:
    """
    Access Token을 검증하고 페이로드(TokenData)를 반환
    서명, 만료, 발급자, 대상 중 하나라도 맞지 않으면 None
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except JWTError:
        return None

    return TokenData(
        user_id=payload.get("uid"),
        email=payload.get("sub"),
        jti=payload.get("jti"),
        roles=payload.get("roles") or [],
    )
