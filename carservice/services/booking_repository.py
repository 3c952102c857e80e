"""
Booking persistence scoped to an owner.

Every lookup filters on both the booking id and the owner id, so a booking
that belongs to someone else is reported exactly like one that does not
exist.  Status changes are unrestricted: any status may follow any other.
"""

import logging
from datetime import date, datetime
from typing import Dict, List

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from carservice.errors import NotFound, ValidationError
from carservice.models.booking import Booking, BookingStatus
from carservice.utils.validation_helpers import require_fields

logger = logging.getLogger(__name__)

# Largest value a signed 64-bit INTEGER primary key can hold.
MAX_BOOKING_ID = 2**63 - 1


class BookingRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        owner_id: int,
        service_type: str,
        vehicle_type: str,
        vehicle_model: str,
        preferred_date: date,
        preferred_time: str,
        description: str = None,
    ) -> Booking:
        require_fields(
            {
                "service_type": service_type,
                "vehicle_type": vehicle_type,
                "vehicle_model": vehicle_model,
                "preferred_date": preferred_date,
                "preferred_time": preferred_time,
            }
        )
        now = datetime.utcnow()
        booking = Booking(
            user_id=owner_id,
            service_type=service_type,
            vehicle_type=vehicle_type,
            vehicle_model=vehicle_model,
            preferred_date=preferred_date,
            preferred_time=preferred_time,
            description=description or "",
            status=BookingStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        logger.debug(f"Created booking: {booking.id} for user: {owner_id}")
        return booking

    def list_by_owner(self, owner_id: int) -> List[Booking]:
        bookings = (
            self.db.query(Booking)
            .filter(Booking.user_id == owner_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .all()
        )
        logger.debug(f"Retrieved {len(bookings)} bookings for user: {owner_id}")
        return bookings

    def get(self, booking_id: int, owner_id: int) -> Booking:
        if not -MAX_BOOKING_ID <= booking_id <= MAX_BOOKING_ID:
            raise NotFound()
        booking = (
            self.db.query(Booking)
            .filter(Booking.id == booking_id, Booking.user_id == owner_id)
            .first()
        )
        if booking is None:
            logger.error(f"Booking not found: {booking_id} for user: {owner_id}")
            raise NotFound()
        return booking

    def set_status(self, booking_id: int, owner_id: int, new_status) -> Booking:
        status = BookingStatus.parse(new_status)
        if status is None:
            raise ValidationError("Invalid status")
        booking = self.get(booking_id, owner_id)
        booking.status = status.value
        booking.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(booking)
        logger.debug(f"Booking {booking_id} status set to {status.value}")
        return booking

    def cancel(self, booking_id: int, owner_id: int) -> Booking:
        return self.set_status(booking_id, owner_id, BookingStatus.CANCELLED)

    def stats(self, owner_id: int) -> Dict[str, int]:
        """Count the owner's bookings per status in one aggregate query."""

        def bucket(status):
            return func.coalesce(func.sum(case((Booking.status == status.value, 1), else_=0)), 0)

        row = (
            self.db.query(
                func.count(Booking.id),
                bucket(BookingStatus.PENDING),
                bucket(BookingStatus.CONFIRMED),
                bucket(BookingStatus.IN_PROGRESS),
                bucket(BookingStatus.COMPLETED),
                bucket(BookingStatus.CANCELLED),
            )
            .filter(Booking.user_id == owner_id)
            .one()
        )
        total, pending, confirmed, in_progress, completed, cancelled = (int(value) for value in row)
        return {
            "total": total,
            "pending": pending,
            "confirmed": confirmed,
            "in_progress": in_progress,
            "completed": completed,
            "cancelled": cancelled,
        }
