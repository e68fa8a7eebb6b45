"""
Booking Related Views
-------------------------

Handles the creation and lookup of bookings. A booking is addressed by
its booking reference, and can also be reached through its user at
``/users/{email}/bookings/{reference}``.
"""
from http import HTTPStatus

from aiohttp_apispec import docs
from marshmallow.fields import Integer

from gocargo.models import Booking
from gocargo.serializer import JSendSchema, JSendStatus, Many, expects, returns
from gocargo.serializer.jsend import fail
from gocargo.serializer.misc import BookingCreateSchema
from gocargo.serializer.models import BookingSchema, CarSchema
from gocargo.service import ConflictError, NotFoundError
from gocargo.service.access.bookings import get_booking
from gocargo.views.base import BaseView
from gocargo.views.decorators import match_getter


class BookingsView(BaseView):
    """
    Gets, adds to, or clears the list of bookings.
    """
    url = "/bookings"
    name = "bookings"

    @docs(summary="Get All Bookings")
    @returns(JSendSchema.of(bookings=Many(BookingSchema())))
    async def get(self):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"bookings": [booking.serialize(self.base_url) for booking in await self.booking_manager.get_all()]}
        }

    @docs(summary="Create A Booking")
    @expects(BookingCreateSchema())
    @returns(
        reference_taken=(JSendSchema(), HTTPStatus.CONFLICT),
        missing=(JSendSchema(), HTTPStatus.NOT_FOUND),
        created=(JSendSchema.of(booking=BookingSchema()), HTTPStatus.CREATED)
    )
    async def post(self):
        """
        Books a car for a user between two dates. If no ``bookingReference``
        is supplied, one is generated and returned with the booking.
        """
        try:
            booking = await self.booking_manager.create(**self.request["data"])
        except ConflictError as error:
            return "reference_taken", fail("A booking with this reference already exists.", errors=error.errors)
        except NotFoundError as error:
            return "missing", fail(str(error), params=error.params)

        return "created", {
            "status": JSendStatus.SUCCESS,
            "data": {"booking": booking.serialize(self.base_url)}
        }

    @docs(summary="Delete All Bookings")
    @returns(JSendSchema.of(deleted=Integer()))
    async def delete(self):
        """Deletes every booking, and empties every user's list of bookings."""
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"deleted": await self.booking_manager.delete_all()}
        }


class BookingView(BaseView):
    """
    Gets a single booking.
    """
    url = "/bookings/{reference}"
    name = "booking"
    with_booking = match_getter(get_booking, "booking", reference="reference")

    @with_booking
    @docs(summary="Get A Booking")
    @returns(JSendSchema.of(booking=BookingSchema()))
    async def get(self, booking: Booking):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"booking": booking.serialize(self.base_url)}
        }


class BookingCarView(BaseView):
    """
    Gets the car of a booking.
    """
    url = "/bookings/{reference}/car"
    name = "booking_car"
    with_booking = match_getter(get_booking, "booking", reference="reference")

    @with_booking
    @docs(summary="Get The Car Of A Booking")
    @returns(JSendSchema.of(car=CarSchema()))
    async def get(self, booking: Booking):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"car": booking.car.serialize(self.base_url)}
        }
