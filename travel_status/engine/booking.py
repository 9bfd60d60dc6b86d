"""Booking classification from the flight and hotel references."""

from typing import Optional

from travel_status.schemas.status_schema import BookingEvaluation, BookingState
from travel_status.utils import is_blank


def evaluate_booking(flight_ref: Optional[str], hotel_ref: Optional[str]) -> BookingEvaluation:
    """Booked when either reference is set."""
    flight = None if is_blank(flight_ref) else str(flight_ref).strip()
    hotel = None if is_blank(hotel_ref) else str(hotel_ref).strip()
    state = BookingState.BOOKED if (flight or hotel) else BookingState.NOT_BOOKED
    return BookingEvaluation(state=state, flight_ref=flight, hotel_ref=hotel)
