import uuid
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from core.database import Base
from core.time import utcnow

class User(Base):
    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(100), index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    roles = relationship("UserRole", back_populates="user", cascade="all, delete-orphan", lazy="selectin")
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    favorite_locations = relationship("FavoriteLocation", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def role_names(self) -> list[str]:
        return sorted(r.role.value for r in self.roles)
