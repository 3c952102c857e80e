import enum
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from carservice.db import Base


class BookingStatus(str, enum.Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, value):
        """Return the status named by ``value`` or ``None``.

        Accepts the display value ("In Progress") and its compact spelling
        ("InProgress").
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        for member in cls:
            if value in (member.value, member.value.replace(" ", "")):
                return member
        return None


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    service_type = Column(String(255), nullable=False)
    vehicle_type = Column(String(100), nullable=False)
    vehicle_model = Column(String(255), nullable=False)
    preferred_date = Column(Date, nullable=False)
    preferred_time = Column(String(20), nullable=False)
    description = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    owner = relationship("User", back_populates="bookings")
