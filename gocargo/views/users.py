"""
User Related Views
-------------------------

Handles all the user CRUD, and the user's view of their bookings.
"""
from http import HTTPStatus

from aiohttp_apispec import docs
from marshmallow.fields import Integer

from gocargo.models import User, Booking
from gocargo.serializer import JSendSchema, JSendStatus, Many, expects, returns
from gocargo.serializer.jsend import fail
from gocargo.serializer.misc import UserRegisterSchema
from gocargo.serializer.models import UserSchema, BookingSchema, CarSchema
from gocargo.service import ConflictError, NotFoundError
from gocargo.service.access.bookings import get_user_bookings, get_user_booking
from gocargo.service.access.users import get_users, get_user, create_user, update_user, delete_user, delete_users
from gocargo.views.base import BaseView
from gocargo.views.decorators import match_getter

USER_IDENTIFIER = "{email:[^{}/]+}"


async def get_user_and_booking(email: str, reference: str):
    """Gets a user, and one of their bookings."""
    user = await get_user(email=email)
    booking = await get_user_booking(user, reference) if user is not None else None
    return user, booking


class UsersView(BaseView):
    """
    Gets, adds to, or clears the list of users.
    """
    url = "/users"
    name = "users"

    @docs(summary="Get All Users")
    @returns(JSendSchema.of(users=Many(UserSchema())))
    async def get(self):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"users": [user.serialize(self.base_url) for user in await get_users()]}
        }

    @docs(summary="Register A User")
    @expects(UserRegisterSchema())
    @returns(
        user_exists=(JSendSchema(), HTTPStatus.CONFLICT),
        created=(JSendSchema.of(user=UserSchema()), HTTPStatus.CREATED)
    )
    async def post(self):
        """Registers a new user. Only a hash of the password is kept."""
        try:
            user = await create_user(**self.request["data"])
        except ConflictError as error:
            return "user_exists", fail("A user with this email already exists.", errors=error.errors)

        return "created", {
            "status": JSendStatus.SUCCESS,
            "data": {"user": user.serialize(self.base_url)}
        }

    @docs(summary="Delete All Users")
    @returns(JSendSchema.of(deleted=Integer()))
    async def delete(self):
        """Deletes every user, along with all of their bookings."""
        await self.booking_manager.delete_all()
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"deleted": await delete_users()}
        }


class UserView(BaseView):
    """
    Gets, replaces, updates or deletes a single user.
    """
    url = f"/users/{USER_IDENTIFIER}"
    name = "user"
    with_user = match_getter(get_user, "user", email="email")

    @with_user
    @docs(summary="Get A User")
    @returns(JSendSchema.of(user=UserSchema()))
    async def get(self, user: User):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"user": user.serialize(self.base_url)}
        }

    @with_user
    @docs(summary="Replace A User")
    @expects(UserRegisterSchema())
    @returns(
        email_taken=(JSendSchema(), HTTPStatus.CONFLICT),
        updated=JSendSchema.of(user=UserSchema())
    )
    async def put(self, user: User):
        return await self._update(user)

    @with_user
    @docs(summary="Update A User")
    @expects(UserRegisterSchema(partial=True))
    @returns(
        email_taken=(JSendSchema(), HTTPStatus.CONFLICT),
        updated=JSendSchema.of(user=UserSchema())
    )
    async def patch(self, user: User):
        return await self._update(user)

    @with_user
    @docs(summary="Delete A User")
    @returns(JSendSchema.of(user=UserSchema()))
    async def delete(self, user: User):
        """Deletes the user along with their bookings."""
        await self.booking_manager.delete_for_user(user)
        await delete_user(user)
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"user": user.serialize()}
        }

    async def _update(self, user: User):
        try:
            user = await update_user(user, **self.request["data"])
        except ConflictError as error:
            return "email_taken", fail("That email is in use by another user.", errors=error.errors)

        return "updated", {
            "status": JSendStatus.SUCCESS,
            "data": {"user": user.serialize(self.base_url)}
        }


class UserBookingsView(BaseView):
    """
    Gets the bookings of a user.
    """
    url = f"/users/{USER_IDENTIFIER}/bookings"
    name = "user_bookings"
    with_user = match_getter(get_user, "user", email="email")

    @with_user
    @docs(summary="Get All Bookings For User")
    @returns(JSendSchema.of(bookings=Many(BookingSchema())))
    async def get(self, user: User):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"bookings": [
                booking.serialize(self.base_url, scoped_to_user=True)
                for booking in await get_user_bookings(user)
            ]}
        }


class UserBookingView(BaseView):
    """
    Gets or cancels one of the bookings of a user.
    """
    url = f"/users/{USER_IDENTIFIER}/bookings/{{reference}}"
    name = "user_booking"
    with_booking = match_getter(get_user_and_booking, "user", "booking", email="email", reference="reference")

    @with_booking
    @docs(summary="Get A Booking For User")
    @returns(JSendSchema.of(booking=BookingSchema()))
    async def get(self, user: User, booking: Booking):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"booking": booking.serialize(self.base_url, scoped_to_user=True)}
        }

    @with_booking
    @docs(summary="Delete A Booking For User")
    @returns(
        missing=(JSendSchema(), HTTPStatus.NOT_FOUND),
        deleted=JSendSchema.of(booking=BookingSchema())
    )
    async def delete(self, user: User, booking: Booking):
        """Deletes the booking, and removes it from the user's list of bookings."""
        try:
            booking = await self.booking_manager.delete(user.email, booking.reference)
        except NotFoundError as error:
            return "missing", fail(str(error), params=error.params)

        return "deleted", {
            "status": JSendStatus.SUCCESS,
            "data": {"booking": booking.serialize()}
        }


class UserBookingCarView(BaseView):
    """
    Gets the car of one of the bookings of a user.
    """
    url = f"/users/{USER_IDENTIFIER}/bookings/{{reference}}/car"
    name = "user_booking_car"
    with_booking = match_getter(get_user_and_booking, "user", "booking", email="email", reference="reference")

    @with_booking
    @docs(summary="Get The Car Of A Booking For User")
    @returns(JSendSchema.of(car=CarSchema()))
    async def get(self, user: User, booking: Booking):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"car": booking.car.serialize(self.base_url)}
        }
