from sqlalchemy import Column, String, Float, ForeignKey, Numeric, Text, CheckConstraint
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class OptionalItem(BaseModel, Base):
    """Optional add-on offered on top of an itinerary's details."""
    __tablename__ = "optional"

    detail_id = Column(String(36), ForeignKey("details.id", ondelete="RESTRICT"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=True)
    duration = Column(Float, nullable=True)
    description = Column(Text, nullable=True)
    observations = Column(Text, nullable=True)

    details = relationship("Details", back_populates="optional")

    __table_args__ = (
        CheckConstraint("(duration IS NULL) OR (duration > 0)", name="ck_optional_duration_positive"),
    )
