from datetime import datetime
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    """JSON 필드명은 camelCase (refreshToken, expiresIn ...)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class TokenData(BaseModel):
    user_id: str | None = None
    email: str | None = None
    jti: str | None = None
    roles: list[str] = []

class Tokens(CamelModel):
    """
    클라이언트에게 최종 반환될 토큰 응답
    expires_in: 리프레시 토큰 남은 수명 (초)
    """
    access_token: str
    refresh_token: str
    expires_in: int

class RefreshTokenRequest(CamelModel):
    refresh_token: str = ""

class RefreshTokenResponse(CamelModel):
    tokens: Tokens

class RevokeTokenResponse(CamelModel):
    revoked: bool

class RefreshTokenSession(CamelModel):
    """토큰 원장 조회용 (토큰 문자열은 노출하지 않음)"""
    id: str
    created_at: datetime
    expires_at: datetime
    revoked_at: datetime | None = None
    reason_revoked: str | None = None
    active: bool
