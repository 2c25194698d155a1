import enum
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from core.database import Base
from core.time import as_utc, utcnow

class RevocationReason(str, enum.Enum):
    LOGGED_OUT = "Logged out"
    REFRESHED = "Refreshed"
    REVOKED = "Revoked without replacement"

class RefreshToken(Base):
    """
    리프레시 토큰 원장
    폐기된 토큰도 삭제하지 않는다 (감사/재사용 탐지용)
    """
    __tablename__ = "refresh_tokens"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False)

    token = Column(String(512), unique=True, index=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    revoked_at = Column(DateTime(timezone=True), nullable=True)
    reason_revoked = Column(String(64), nullable=True)
    replaced_by_token = Column(String(512), nullable=True)

    user = relationship("User", back_populates="refresh_tokens")

    @property
    def is_expired(self) -> bool:
        return utcnow() >= as_utc(self.expires_at)

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    @property
    def is_active(self) -> bool:
        return not self.is_revoked and not self.is_expired
