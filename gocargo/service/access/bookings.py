"""
Bookings
========
"""

from typing import List, Optional, Iterable

from gocargo.models import Booking, User


async def get_bookings() -> List[Booking]:
    """Gets all the bookings in the system."""
    return await Booking.all().prefetch_related("car", "user")


async def get_booking(reference: str) -> Optional[Booking]:
    """Gets the booking with the given reference."""
    return await Booking.filter(reference=reference).prefetch_related("car", "user").first()


async def get_bookings_by_ids(ids: Iterable[int]) -> List[Booking]:
    """Gets the bookings matching the given ids, in the order of the ids."""
    ids = list(ids)
    if not ids:
        return []

    bookings = {b.id: b for b in await Booking.filter(id__in=ids).prefetch_related("car", "user")}
    return [bookings[bid] for bid in ids if bid in bookings]


async def get_user_bookings(user: User) -> List[Booking]:
    """Gets the bookings listed on a user."""
    return await get_bookings_by_ids(user.booking_ids)


async def get_user_booking(user: User, reference: str) -> Optional[Booking]:
    """Gets one of the bookings listed on a user by its reference."""
    if not user.booking_ids:
        return None

    return await Booking.filter(
        id__in=user.booking_ids, reference=reference
    ).prefetch_related("car", "user").first()


async def get_car_bookings(car_id: int) -> List[Booking]:
    return await Booking.filter(car_id=car_id).prefetch_related("car", "user")


async def reference_exists(reference: str) -> bool:
    return await Booking.filter(reference=reference).exists()


async def delete_bookings() -> int:
    """Deletes every booking, returning how many were removed."""
    return await Booking.all().delete()
