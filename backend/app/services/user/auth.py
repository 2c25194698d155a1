import logging
from contextlib import asynccontextmanager
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import (
    AuthenticationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from core.security.token import create_access_token
from core.time import as_utc, utcnow
from models.refresh_token import RefreshToken, RevocationReason
from models.user import User
from schemas.token import Tokens, RefreshTokenResponse
from schemas.user import AuthResponse, UserProfile
from services.user.general import (
    user_general_service,
    check_email_format,
    check_password_policy,
)
from services.user.token import token_service

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"

def _require(value: str, field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required")
    return value

class AuthService:
    """
    회원가입/로그인/로그아웃/토큰 재발급/토큰 폐기 흐름

    리프레시 토큰 상태: Active -> Revoked(reason)
    Revoked와 만료 상태에서는 어떤 전이도 일어나지 않는다.
    각 메서드는 하나의 작업 단위이며 마지막에 한 번만 커밋한다.
    """

    @asynccontextmanager
    async def _unit_of_work(self, db: AsyncSession, action: str):
        try:
            yield
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"⛔ {action} 중 DB 오류 발생, 롤백합니다: {e}", exc_info=True)
            raise PersistenceError(f"{action} failed") from e
        except Exception:
            await db.rollback()
            raise

    def _issue_access_token(self, user: User) -> str:
        return create_access_token(
            user_id=user.user_id,
            username=user.username,
            email=user.email,
            roles=user.role_names,
        )

    def _profile(self, user: User, access_token: str) -> UserProfile:
        return UserProfile(
            id=user.user_id,
            username=user.username,
            email=user.email,
            roles=user.role_names,
            jwt=access_token,
        )

    def _tokens(self, access_token: str, refresh_token: RefreshToken) -> Tokens:
        expires_in = int((as_utc(refresh_token.expires_at) - utcnow()).total_seconds())
        return Tokens(
            access_token=access_token,
            refresh_token=refresh_token.token,
            expires_in=expires_in,
        )

    async def register(self, db: AsyncSession, email: str, password: str, username: str) -> AuthResponse:
        _require(email, "Email")
        _require(password, "Password")
        _require(username, "Username")
        check_email_format(email.strip())
        check_password_policy(password)

        async with self._unit_of_work(db, "Registration"):
            if await user_general_service.check_existence(db, "email", email):
                raise ConflictError("User with this email already exists")

            try:
                user = await user_general_service.create_user_general(
                    db=db,
                    username=username.strip(),
                    email=email,
                    password=password,
                )
            except IntegrityError:
                # 동시 가입으로 unique 제약에 걸린 경우
                raise ConflictError("User with this email already exists")

            access_token = self._issue_access_token(user)
            refresh_token = await token_service.issue(db, user.user_id)

        logger.info(f"✅ 회원가입 완료: user={user.user_id}")
        return AuthResponse(
            user=self._profile(user, access_token),
            tokens=self._tokens(access_token, refresh_token),
        )

    async def login(self, db: AsyncSession, email: str, password: str) -> AuthResponse:
        _require(email, "Email")
        _require(password, "Password")

        async with self._unit_of_work(db, "Login"):
            user = await user_general_service.authenticate(db, email, password)
            if user is None:
                raise AuthenticationError(INVALID_CREDENTIALS)

            await user_general_service.mark_login(db, user)
            access_token = self._issue_access_token(user)
            refresh_token = await token_service.issue(db, user.user_id)

        logger.info(f"✅ 로그인: user={user.user_id}")
        return AuthResponse(
            user=self._profile(user, access_token),
            tokens=self._tokens(access_token, refresh_token),
        )

    async def logout(self, db: AsyncSession, user_id: str) -> int:
        """모든 기기에서 로그아웃 (활성 리프레시 토큰 전부 폐기)"""
        async with self._unit_of_work(db, "Logout"):
            # 진행 중인 토큰 교체가 커밋된 뒤에 일괄 폐기가 시작되도록 사용자 행을 먼저 잠근다
            user = await user_general_service.lock_user(db, user_id)
            if user is None:
                raise NotFoundError("User not found")

            revoked = await token_service.revoke_all_active_for_user(
                db, user.user_id, RevocationReason.LOGGED_OUT
            )

        logger.info(f"✅ 로그아웃: user={user_id}, 폐기된 토큰 {revoked}개")
        return revoked

    async def refresh(self, db: AsyncSession, refresh_token: str) -> RefreshTokenResponse:
        _require(refresh_token, "Refresh token")

        async with self._unit_of_work(db, "Token refresh"):
            record = await token_service.lookup(db, refresh_token)
            if record is None:
                raise NotFoundError("Invalid refresh token")
            if not record.is_active:
                raise InvalidStateError("Refresh token is expired or revoked")

            user = await user_general_service.lock_user(db, record.user_id)
            if user is None:
                raise NotFoundError("User not found")

            new_record = await token_service.rotate(db, record)
            access_token = self._issue_access_token(user)

        return RefreshTokenResponse(tokens=self._tokens(access_token, new_record))

    async def revoke(self, db: AsyncSession, refresh_token: str) -> bool:
        """토큰 폐기. 없거나 이미 비활성이면 False (오류 아님)"""
        if not refresh_token:
            return False

        async with self._unit_of_work(db, "Token revoke"):
            record = await token_service.lookup(db, refresh_token)
            if record is None or not record.is_active:
                return False
            try:
                await token_service.revoke(db, record, RevocationReason.REVOKED)
            except InvalidStateError:
                # 조회 이후 다른 요청이 먼저 폐기함
                return False

        logger.info(f"✅ 리프레시 토큰 폐기: user={record.user_id}, record={record.id}")
        return True

    async def get_current_user(self, db: AsyncSession, user_id: str) -> UserProfile:
        user = await user_general_service.get_user_by_id(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return self._profile(user, self._issue_access_token(user))

    async def delete_account(self, db: AsyncSession, user_id: str) -> None:
        async with self._unit_of_work(db, "Account deletion"):
            user = await user_general_service.get_user_by_id(db, user_id)
            if user is None:
                raise NotFoundError("User not found")
            await user_general_service.delete_user(db, user)

        logger.info(f"✅ 회원 탈퇴: user={user_id}")

auth_service = AuthService()
