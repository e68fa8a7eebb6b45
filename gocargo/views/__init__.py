"""
.. autoclasstree:: gocargo.views

The REST api for registering users and managers, managing fleets of cars, and booking them.

Conventions
-----------

* Resources are nouns (users, managers, cars, bookings) addressed by their business key:
  an email, a registration or a booking reference.
* GET, PUT, PATCH and DELETE are idempotent_. PUT replaces a resource, PATCH updates some of its fields.
* Collections are filtered with the query string.

Field names on the wire follow the existing web client (``fname``, ``bookingReference``).

Responses
---------

The server responds with JSend formatted JSON to all requests, except for
the car images which are sent as they are. Resources carry a ``links`` map
pointing at related resources. DELETE requests respond with the deleted
resource, or with the number of deleted resources when clearing a collection.

.. _idempotent: https://www.w3.org/Protocols/rfc2616/rfc2616-sec9.html#sec9.1.2
"""

import aiohttp_cors
from aiohttp.abc import Application

from gocargo import logger
from .bookings import BookingsView, BookingView, BookingCarView
from .cars import CarsView, CarView, CarImageView
from .managers import ManagersView, ManagerAuthView, ManagerView, ManagerCarsView, ManagerCarView
from .misc import ApiRootView
from .users import UsersView, UserView, UserBookingsView, UserBookingView, UserBookingCarView

views = [
    ApiRootView,
    UsersView, UserView, UserBookingsView, UserBookingView, UserBookingCarView,
    ManagersView, ManagerAuthView, ManagerView, ManagerCarsView, ManagerCarView,
    CarsView, CarView, CarImageView,
    BookingsView, BookingView, BookingCarView,
]


def register_views(app: Application, base: str):
    """
    Registers all the API views onto the given router at a specific root url.

    :param app: The app to register the views to.
    :param base: The base URL.
    """
    cors = aiohttp_cors.setup(app, defaults={
        "*": aiohttp_cors.ResourceOptions(
            allow_credentials=True,
            expose_headers="*",
            allow_headers="*",
            allow_methods="*",
        )
    })

    for view in views:
        logger.info("Registered %s at %s", view.__name__, base + view.url)
        view.register_route(app, base)
        view.enable_cors(cors)
