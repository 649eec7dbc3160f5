from enum import Enum

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from sqlalchemy.types import Enum as SAEnum

from models.base_model import Base, BaseModel


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


class User(BaseModel, Base):
    __tablename__ = "users"

    fullname = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    # Stored by value so the database holds the same lowercase strings the API accepts
    role = Column(
        SAEnum(Role, name="user_role", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.USER,
    )
    phone = Column(String(32), nullable=False)
    password_hash = Column(String(255), nullable=False)

    itineraries = relationship("Itinerary", back_populates="user")
    refresh_tokens = relationship("RefreshToken", back_populates="user")

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")
