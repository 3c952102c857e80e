from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from carservice.db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, index=True, nullable=False)
    # bcrypt hash, never the plain password
    password = Column(String(255), nullable=False)
    mobile_number = Column(String(20), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    bookings = relationship(
        "Booking", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True
    )
