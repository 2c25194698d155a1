import enum
from sqlalchemy import Column, String, ForeignKey, Enum as SAEnum, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from core.database import Base

class Role(str, enum.Enum):
    ADMIN = "Admin"
    USER = "User"

DEFAULT_ROLE = Role.USER

class UserRole(Base):
    """
    사용자에게 부여된 역할 (액세스 토큰의 roles 클레임)
    """
    __tablename__ = "user_roles"

    user_role_id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)

    role = Column(SAEnum(Role, name="role_enum", values_callable=lambda e: [m.value for m in e]), nullable=False)

    user = relationship("User", back_populates="roles")

    __table_args__ = (
        UniqueConstraint('user_id', 'role', name='uq_user_role'),
    )
