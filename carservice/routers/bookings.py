import logging
from typing import List

from fastapi import APIRouter, Depends, Path, status

from carservice.deps import get_booking_repository, get_current_user
from carservice.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingStats,
    BookingStatusUpdate,
)
from carservice.schemas.user import MessageResponse
from carservice.services.authenticator import Identity
from carservice.services.booking_repository import MAX_BOOKING_ID, BookingRepository

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/bookings",
    tags=["bookings"],
)


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
    description="Book a vehicle service appointment. Requires authentication.",
)
def create_booking(
    booking: BookingCreate,
    repository: BookingRepository = Depends(get_booking_repository),
    current_user: Identity = Depends(get_current_user),
):
    """
    Create a new booking owned by the caller. New bookings start as Pending.

    - **serviceType**, **vehicleType**, **vehicleModel**: Required.
    - **preferredDate**: Calendar date, e.g. 2024-06-01.
    - **preferredTime**: Time of day, e.g. 10:00.
    - **description**: Optional notes.
    """
    logger.debug(f"Creating booking for user: {current_user.username}")
    return repository.create(
        current_user.user_id,
        service_type=booking.service_type,
        vehicle_type=booking.vehicle_type,
        vehicle_model=booking.vehicle_model,
        preferred_date=booking.preferred_date,
        preferred_time=booking.preferred_time,
        description=booking.description,
    )


@router.get(
    "",
    response_model=List[BookingResponse],
    summary="List my bookings",
    description="Bookings owned by the caller, most recent first.",
)
def list_bookings(
    repository: BookingRepository = Depends(get_booking_repository),
    current_user: Identity = Depends(get_current_user),
):
    return repository.list_by_owner(current_user.user_id)


@router.get(
    "/stats",
    response_model=BookingStats,
    summary="Booking counts per status",
)
def booking_stats(
    repository: BookingRepository = Depends(get_booking_repository),
    current_user: Identity = Depends(get_current_user),
):
    return repository.stats(current_user.user_id)


@router.put(
    "/{booking_id}/status",
    response_model=MessageResponse,
    summary="Update booking status",
    description="Set any of Pending, Confirmed, In Progress, Completed or Cancelled.",
)
def update_booking_status(
    update: BookingStatusUpdate,
    booking_id: int = Path(..., le=MAX_BOOKING_ID),
    repository: BookingRepository = Depends(get_booking_repository),
    current_user: Identity = Depends(get_current_user),
):
    repository.set_status(booking_id, current_user.user_id, update.status)
    return {"message": "Booking status updated successfully"}


@router.delete(
    "/{booking_id}",
    response_model=MessageResponse,
    summary="Cancel a booking",
    description="Marks the booking Cancelled. The record is kept.",
)
def cancel_booking(
    booking_id: int = Path(..., le=MAX_BOOKING_ID),
    repository: BookingRepository = Depends(get_booking_repository),
    current_user: Identity = Depends(get_current_user),
):
    repository.cancel(booking_id, current_user.user_id)
    return {"message": "Booking cancelled successfully"}
