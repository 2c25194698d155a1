import os
from pydantic_settings import BaseSettings
from functools import lru_cache

from core.exceptions import ConfigurationError

class Settings(BaseSettings):
    # URL & URI
    DATABASE_URL: str = "sqlite+aiosqlite:///./bff.db"
    FRONTEND_URL: str = "http://localhost:5173"

    # JWT
    JWT_SECRET_KEY: str = ""
    JWT_ISSUER: str = ""
    JWT_AUDIENCE: str = ""
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # 비밀번호 정책
    PASSWORD_MIN_LENGTH: int = 12

    class Config:
        current_file_dir = os.path.dirname(os.path.abspath(__file__))
        app_dir = os.path.dirname(current_file_dir)
        backend_dir = os.path.dirname(app_dir)

        env_file = os.path.join(backend_dir, ".env")
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.FRONTEND_URL.split(",") if origin.strip()]

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings = get_settings()

def ensure_jwt_configured() -> None:
    """
    토큰 서명에 필요한 설정(키/발급자/대상) 확인
    하나라도 비어 있으면 ConfigurationError (서버 기동 불가)
    """
    missing = [
        name for name in ("JWT_SECRET_KEY", "JWT_ISSUER", "JWT_AUDIENCE")
        if not getattr(settings, name)
    ]
    if missing:
        raise ConfigurationError(f"JWT is not configured: {', '.join(missing)}")
