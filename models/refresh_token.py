"""
RefreshToken model: one row per issued refresh token (one per login/device).
Fields:
- token (unique) - the signed refresh token string itself
- user_id (String(36)) - FK to users.id
- expires_at

A row is deleted on logout; once deleted the token string never
authenticates again.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    token = Column(String(512), nullable=False, unique=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="refresh_tokens")

    def __repr__(self):
        return f"<RefreshToken user={self.user_id} expires_at={self.expires_at}>"
