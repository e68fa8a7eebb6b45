"""
Booking Manager
===============

Handles the creation and removal of bookings.

A booking links a user to a car over a range of dates, and the user keeps
the ids of their bookings in a list. Creating or removing a booking is
therefore two writes: one on the booking itself and one on the user's list,
which is delegated to the :class:`~gocargo.service.manager.link_manager.LinkManager`.
There is no transaction spanning both; if the second write fails, the first
is undone by hand before the error is passed on.

Responsibilities
----------------

- assign (or check) booking references
- check that the user and car of a new booking exist
- keep the users' lists of bookings in line with the bookings that exist
"""
import secrets
from datetime import date
from typing import List, Optional

from tortoise.exceptions import IntegrityError

from gocargo import logger
from gocargo.models import Booking, BookingStatus, Car, User
from gocargo.service.access.bookings import get_booking, get_bookings, get_user_booking, get_user_bookings, \
    get_car_bookings, reference_exists, delete_bookings
from gocargo.service.access.cars import get_car
from gocargo.service.access.users import get_user
from gocargo.service.errors import ConflictError, NotFoundError, unique_violations
from gocargo.service.manager.link_manager import LinkManager

REFERENCE_BYTES = 6
"""The number of random bytes in a generated reference (8 url-safe characters)."""

REFERENCE_ATTEMPTS = 5
"""How many generated references are tried before giving up."""


def generate_reference() -> str:
    """Generates a short, random, url-safe booking reference."""
    return secrets.token_urlsafe(REFERENCE_BYTES)


class BookingManager:

    def __init__(self, link_manager: LinkManager):
        self._link_manager = link_manager

    async def create(
        self, user_email: str, car_registration: str, start_date: date, end_date: date,
        status: BookingStatus = BookingStatus.PENDING, content: str = "", reference: Optional[str] = None
    ) -> Booking:
        """
        Books a car for a user.

        :param reference: The booking reference. When omitted, one is generated.
        :raises ConflictError: If the supplied reference is already taken.
        :raises NotFoundError: If either the user or the car does not exist.
        """
        if reference is not None and await reference_exists(reference):
            raise ConflictError({"bookingReference": "There's already a booking with this reference."})

        user = await get_user(email=user_email)
        if user is None:
            raise NotFoundError("user", email=user_email)

        car = await get_car(registration=car_registration)
        if car is None:
            raise NotFoundError("car", registration=car_registration)

        booking = await self._insert(reference, user, car, start_date, end_date, status, content)

        try:
            await self._link_manager.link_booking(user, booking.id)
        except Exception:
            logger.exception("Could not link booking %s to user %s, removing it", booking.reference, user.id)
            await booking.delete()
            raise

        logger.info("Created booking %s for user %s on car %s", booking.reference, user.id, car.id)
        return await get_booking(booking.reference)

    async def delete(self, user_email: str, reference: str) -> Booking:
        """
        Removes one of a user's bookings, and takes it off their list.

        :raises NotFoundError: If the user does not exist, or has no booking with that reference.
        """
        user = await get_user(email=user_email)
        if user is None:
            raise NotFoundError("user", email=user_email)

        booking = await get_user_booking(user, reference)
        if booking is None:
            raise NotFoundError("booking", email=user_email, reference=reference)

        await self._remove(booking)
        return booking

    async def delete_all(self) -> int:
        """Removes every booking, emptying every user's list of bookings."""
        count = await delete_bookings()
        await self._link_manager.clear_booking_links()
        logger.info("Removed all %s bookings", count)
        return count

    async def delete_for_car(self, car: Car) -> int:
        """Removes every booking of a car."""
        bookings = await get_car_bookings(car.id)
        for booking in bookings:
            await self._remove(booking)
        return len(bookings)

    async def delete_for_user(self, user: User) -> int:
        """Removes every booking of a user."""
        bookings = await Booking.filter(user_id=user.id)
        for booking in bookings:
            await booking.delete()
        await self._link_manager.clear_booking_links_for(user)
        return len(bookings)

    async def get(self, reference: str) -> Optional[Booking]:
        return await get_booking(reference)

    async def get_for_user(self, user_email: str, reference: str = None):
        """
        Gets all the bookings for a user, or a single one if a reference is given.

        :raises NotFoundError: If the user does not exist.
        """
        user = await get_user(email=user_email)
        if user is None:
            raise NotFoundError("user", email=user_email)

        if reference is None:
            return await get_user_bookings(user)

        return await get_user_booking(user, reference)

    async def get_all(self) -> List[Booking]:
        return await get_bookings()

    async def _insert(self, reference, user, car, start_date, end_date, status, content) -> Booking:
        """
        Inserts the booking, generating a reference if needed. The unique
        constraint on the reference is what finally guarantees uniqueness,
        as the earlier check can race with another request.
        """
        attempts = 1 if reference is not None else REFERENCE_ATTEMPTS

        for attempt in range(attempts):
            candidate = reference if reference is not None else generate_reference()
            try:
                return await Booking.create(
                    reference=candidate, user=user, car=car, start_date=start_date,
                    end_date=end_date, status=status, content=content
                )
            except IntegrityError as error:
                errors = unique_violations(error, "There's already a booking with this reference.")
                if not errors:
                    raise error
                if reference is not None or attempt == attempts - 1:
                    raise ConflictError({"bookingReference": "There's already a booking with this reference."})
                logger.debug("Generated booking reference %s collided, retrying", candidate)

    async def _remove(self, booking: Booking):
        """Deletes a booking fetched with its user, and takes it off the user's list."""
        booking_id = booking.id
        await booking.delete()
        await self._link_manager.unlink_booking(booking.user, booking_id)
        logger.info("Removed booking %s", booking.reference)
