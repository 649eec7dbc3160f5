from sqlalchemy import (
    Column,
    String,
    Float,
    ForeignKey,
    JSON,
    Numeric,
    Text,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Details(BaseModel, Base):
    __tablename__ = "details"

    # One details row per itinerary; RESTRICT keeps the explicit cascade honest
    itinerary_id = Column(
        String(36),
        ForeignKey("itineraries.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
        index=True,
    )
    description = Column(Text, nullable=False)
    tour = Column(Text, nullable=True)
    alert = Column(Text, nullable=True)
    duration = Column(Float, nullable=True)  # validated > 0 (in schema)
    included = Column(Text, nullable=True)
    not_included = Column(Text, nullable=True)
    meeting_point = Column(Text, nullable=True)
    cost_per_person = Column(Numeric(10, 2), nullable=True)
    # {security, accessibility, recommendations}
    additional = Column(JSON, nullable=True)

    itinerary = relationship("Itinerary", back_populates="details")
    optional = relationship("OptionalItem", back_populates="details", passive_deletes="all")

    __table_args__ = (
        CheckConstraint("(duration IS NULL) OR (duration > 0)", name="ck_details_duration_positive"),
    )
