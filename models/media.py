from sqlalchemy import Column, String, ForeignKey, Text
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Media(BaseModel, Base):
    __tablename__ = "media"

    url = Column(Text, nullable=False)
    itinerary_id = Column(String(36), ForeignKey("itineraries.id", ondelete="RESTRICT"), nullable=False, index=True)

    itinerary = relationship("Itinerary", back_populates="media")
