import logging
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm.attributes import set_committed_value
from datetime import datetime, timedelta

from core.config import settings
from core.exceptions import InvalidStateError, PersistenceError
from core.security.token import create_refresh_token
from core.time import utcnow
from models.refresh_token import RefreshToken, RevocationReason

logger = logging.getLogger(__name__)

MAX_TOKEN_GENERATION_ATTEMPTS = 3

class TokenService:
    """
    리프레시 토큰 원장

    모든 쓰기는 flush까지만 하고 commit은 호출자(AuthService)가 한 번에 한다.
    폐기는 조건부 UPDATE(revoked_at IS NULL AND expires_at > now)로 수행하므로
    동시에 같은 토큰을 소비하려는 요청 중 하나만 성공한다.
    """

    def refresh_token_lifetime(self) -> timedelta:
        return timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)

    async def _generate_unique_token(self, db: AsyncSession) -> str:
        # 충돌 확률은 무시할 수준이지만 unique 인덱스와 함께 재생성으로 방어
        for _ in range(MAX_TOKEN_GENERATION_ATTEMPTS):
            candidate = create_refresh_token()
            if await self.lookup(db, candidate) is None:
                return candidate
            logger.warning("💡 리프레시 토큰 난수 충돌, 재생성합니다.")
        raise PersistenceError("Could not generate a unique refresh token")

    async def _add(self, db: AsyncSession, user_id: str, token: str, now: datetime) -> RefreshToken:
        record = RefreshToken(
            user_id=user_id,
            token=token,
            created_at=now,
            expires_at=now + self.refresh_token_lifetime(),
        )
        db.add(record)
        await db.flush()
        return record

    async def issue(self, db: AsyncSession, user_id: str, now: datetime | None = None) -> RefreshToken:
        """새 리프레시 토큰 발급 (기존 레코드는 절대 재사용하지 않음)"""
        now = now or utcnow()
        token = await self._generate_unique_token(db)
        record = await self._add(db, user_id, token, now)
        logger.info(f"💡 리프레시 토큰 발급: user={user_id}, record={record.id}")
        return record

    async def lookup(self, db: AsyncSession, token: str) -> RefreshToken | None:
        result = await db.execute(select(RefreshToken).where(RefreshToken.token == token))
        return result.scalars().first()

    async def list_for_user(self, db: AsyncSession, user_id: str) -> list[RefreshToken]:
        result = await db.execute(
            select(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .order_by(RefreshToken.created_at.desc())
        )
        return list(result.scalars().all())

    async def revoke(
        self,
        db: AsyncSession,
        record: RefreshToken,
        reason: RevocationReason,
        replaced_by_token: str | None = None,
        now: datetime | None = None,
    ) -> RefreshToken:
        """
        활성 토큰 1건 폐기
        이미 폐기/만료된 토큰이면 InvalidStateError (한 번 폐기된 토큰은 되살리지 않음)
        """
        now = now or utcnow()
        result = await db.execute(
            update(RefreshToken)
            .where(
                RefreshToken.id == record.id,
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at > now,
            )
            .values(
                revoked_at=now,
                reason_revoked=reason.value,
                replaced_by_token=replaced_by_token,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidStateError("Refresh token is expired or revoked")

        set_committed_value(record, "revoked_at", now)
        set_committed_value(record, "reason_revoked", reason.value)
        set_committed_value(record, "replaced_by_token", replaced_by_token)
        return record

    async def rotate(self, db: AsyncSession, old_record: RefreshToken, now: datetime | None = None) -> RefreshToken:
        """
        기존 토큰을 "Refreshed"로 폐기하고 같은 사용자에게 새 토큰 발급
        두 변경은 같은 트랜잭션에서 커밋되어야 한다
        """
        now = now or utcnow()
        token = await self._generate_unique_token(db)
        await self.revoke(db, old_record, RevocationReason.REFRESHED, replaced_by_token=token, now=now)
        new_record = await self._add(db, old_record.user_id, token, now)
        logger.info(f"💡 리프레시 토큰 교체: user={old_record.user_id}, {old_record.id} -> {new_record.id}")
        return new_record

    async def revoke_all_active_for_user(
        self,
        db: AsyncSession,
        user_id: str,
        reason: RevocationReason,
        now: datetime | None = None,
    ) -> int:
        """사용자의 활성 토큰을 한 번의 UPDATE로 모두 폐기, 폐기된 개수 반환"""
        now = now or utcnow()
        result = await db.execute(
            update(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at > now,
            )
            .values(revoked_at=now, reason_revoked=reason.value)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

token_service = TokenService()
