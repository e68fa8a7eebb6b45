"""
Car Related Views
-------------------------

Handles all the car CRUD. Cars created here are standalone; cars
in a manager's fleet are also handled under ``/managers/{email}/cars``.
"""
from http import HTTPStatus

from aiohttp import web
from aiohttp_apispec import docs
from marshmallow import ValidationError
from marshmallow.fields import Integer

from gocargo.models import Car
from gocargo.serializer import JSendSchema, JSendStatus, Many, expects, returns
from gocargo.serializer.jsend import fail
from gocargo.serializer.misc import CarWriteSchema, CarQuerySchema
from gocargo.serializer.models import CarSchema
from gocargo.service import ConflictError
from gocargo.service.access.cars import get_cars, get_car, create_car, update_car, decode_image
from gocargo.views.base import BaseView
from gocargo.views.decorators import match_getter

CAR_IDENTIFIER = "{registration:[^{}/]+}"


class CarsView(BaseView):
    """
    Gets, adds to, or clears the list of cars.
    """
    url = "/cars"
    name = "cars"

    @docs(summary="Get All Cars")
    @returns(
        bad_query=(JSendSchema(), HTTPStatus.BAD_REQUEST),
        cars=JSendSchema.of(cars=Many(CarSchema()))
    )
    async def get(self):
        """
        Gets the cars, optionally filtered by ``color`` and ``brand``
        and sorted by price with ``sort=asc`` or ``sort=desc``.
        """
        try:
            query = CarQuerySchema().load(dict(self.request.query))
        except ValidationError as error:
            return "bad_query", fail("Invalid query parameters.", errors=error.normalized_messages())

        return "cars", {
            "status": JSendStatus.SUCCESS,
            "data": {"cars": [car.serialize(self.base_url) for car in await get_cars(**query)]}
        }

    @docs(summary="Create A Car")
    @expects(CarWriteSchema())
    @returns(
        car_exists=(JSendSchema(), HTTPStatus.CONFLICT),
        created=(JSendSchema.of(car=CarSchema()), HTTPStatus.CREATED)
    )
    async def post(self):
        """Creates a standalone car, not belonging to any manager."""
        try:
            car = await create_car(**self.request["data"])
        except ConflictError as error:
            return "car_exists", fail("A car with this registration already exists.", errors=error.errors)

        return "created", {
            "status": JSendStatus.SUCCESS,
            "data": {"car": car.serialize(self.base_url)}
        }

    @docs(summary="Delete All Cars")
    @returns(
        no_cars=(JSendSchema(), HTTPStatus.NOT_FOUND),
        deleted=JSendSchema.of(deleted=Integer())
    )
    async def delete(self):
        """Deletes every car, along with their bookings."""
        if not await Car.all().exists():
            return "no_cars", fail("There are no cars to delete.")

        return "deleted", {
            "status": JSendStatus.SUCCESS,
            "data": {"deleted": await self.fleet_manager.delete_all_cars()}
        }


class CarView(BaseView):
    """
    Gets, replaces, updates or deletes a single car.
    """
    url = f"/cars/{CAR_IDENTIFIER}"
    name = "car"
    with_car = match_getter(get_car, "car", registration="registration")

    @with_car
    @docs(summary="Get A Car")
    @returns(JSendSchema.of(car=CarSchema()))
    async def get(self, car: Car):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"car": car.serialize(self.base_url)}
        }

    @with_car
    @docs(summary="Replace A Car")
    @expects(CarWriteSchema())
    @returns(
        registration_taken=(JSendSchema(), HTTPStatus.CONFLICT),
        updated=JSendSchema.of(car=CarSchema())
    )
    async def put(self, car: Car):
        """Replaces the car. Any field not supplied is reset."""
        return await self._update(car, partial=False)

    @with_car
    @docs(summary="Update A Car")
    @expects(CarWriteSchema(partial=True))
    @returns(
        registration_taken=(JSendSchema(), HTTPStatus.CONFLICT),
        updated=JSendSchema.of(car=CarSchema())
    )
    async def patch(self, car: Car):
        return await self._update(car, partial=True)

    @with_car
    @docs(summary="Delete A Car")
    @returns(JSendSchema.of(car=CarSchema()))
    async def delete(self, car: Car):
        """Deletes the car and its bookings, removing it from any manager's fleet."""
        await self.fleet_manager.delete_car(car)
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"car": car.serialize()}
        }

    async def _update(self, car: Car, partial: bool):
        try:
            car = await update_car(car, partial=partial, **self.request["data"])
        except ConflictError as error:
            return "registration_taken", fail("That registration belongs to another car.", errors=error.errors)

        return "updated", {
            "status": JSendStatus.SUCCESS,
            "data": {"car": car.serialize(self.base_url)}
        }


class CarImageView(BaseView):
    """
    Gets the picture of a car.
    """
    url = f"/cars/{CAR_IDENTIFIER}/image"
    name = "car_image"
    with_car = match_getter(get_car, "car", registration="registration")

    @with_car
    @docs(summary="Get The Image Of A Car")
    async def get(self, car: Car):
        """Responds with the raw image, rather than JSON."""
        image = decode_image(car)
        if image is None:
            raise web.HTTPNotFound(
                text=JSendSchema().dumps(fail("This car has no image.")), content_type="application/json"
            )

        body, content_type = image
        return web.Response(body=body, content_type=content_type)
