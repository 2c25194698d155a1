import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, Float, UniqueConstraint
from sqlalchemy.orm import relationship

from core.database import Base
from core.time import utcnow

class FavoriteLocation(Base):
    __tablename__ = "favorite_locations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)

    location_name = Column(String(200), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    saved_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="favorite_locations")

    __table_args__ = (
        UniqueConstraint('user_id', 'location_name', name='uq_user_favorite_location'),
    )
