from sqlalchemy import Boolean, Column, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Itinerary(BaseModel, Base):
    __tablename__ = "itineraries"

    name = Column(String(255), nullable=False)
    cover = Column(Text, nullable=True)
    popular = Column(Boolean, nullable=True)

    # Owner; itineraries survive without a user
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    user = relationship("User", back_populates="itineraries")
    # No ORM cascade: children are removed explicitly before the itinerary,
    # and leftovers surface as a foreign key violation
    media = relationship("Media", back_populates="itinerary", passive_deletes="all")
    details = relationship("Details", back_populates="itinerary", uselist=False, passive_deletes="all")

    __table_args__ = (
        Index("ix_itineraries_name", "name"),
    )
