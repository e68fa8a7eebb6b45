"""
Manager Related Views
-------------------------

Handles manager registration and login, the manager CRUD,
and the cars in a manager's fleet.

Any change to a manager or their fleet requires the session token
issued to that manager by ``POST /managers/auth``.
"""
from datetime import datetime, timezone
from http import HTTPStatus

from aiohttp_apispec import docs
from marshmallow.fields import Integer

from gocargo import logger
from gocargo.models import Manager, Car
from gocargo.permissions import requires, ValidToken, ManagerMatchesToken
from gocargo.serializer import JSendSchema, JSendStatus, Many, expects, returns
from gocargo.serializer.jsend import fail
from gocargo.serializer.misc import ManagerRegisterSchema, AuthenticationSchema, TokenSchema, CarWriteSchema
from gocargo.serializer.models import ManagerSchema, CarSchema
from gocargo.service import ConflictError, NotFoundError, InvalidCredentialsError
from gocargo.service.access.cars import update_car
from gocargo.service.access.managers import get_managers, get_manager, get_manager_cars, get_manager_car, \
    delete_managers
from gocargo.views.base import BaseView
from gocargo.views.decorators import match_getter

MANAGER_IDENTIFIER = "{email:(?!auth$)[^{}/]+}"


async def get_manager_and_car(email: str, registration: str):
    """Gets a manager, and one of the cars in their fleet."""
    manager = await get_manager(email=email)
    car = await get_manager_car(manager, registration) if manager is not None else None
    return manager, car


class ManagersView(BaseView):
    """
    Gets, adds to, or clears the list of managers.
    """
    url = "/managers"
    name = "managers"

    @docs(summary="Get All Managers")
    @returns(JSendSchema.of(managers=Many(ManagerSchema())))
    async def get(self):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"managers": [manager.serialize(self.base_url) for manager in await get_managers()]}
        }

    @docs(summary="Register A Manager")
    @expects(ManagerRegisterSchema())
    @returns(
        manager_exists=(JSendSchema(), HTTPStatus.CONFLICT),
        created=(JSendSchema.of(manager=ManagerSchema()), HTTPStatus.CREATED)
    )
    async def post(self):
        """Registers a new manager. Only a hash of the password is kept."""
        data = self.request["data"]
        try:
            manager = await self.credential_store.register(data.pop("email"), data.pop("password"), **data)
        except ConflictError as error:
            return "manager_exists", fail("A manager with this email already exists.", errors=error.errors)

        logger.info("Registered manager %s", manager.id)
        return "created", {
            "status": JSendStatus.SUCCESS,
            "data": {"manager": manager.serialize(self.base_url)}
        }

    @docs(summary="Delete All Managers")
    @returns(JSendSchema.of(deleted=Integer()))
    async def delete(self):
        """Deletes every manager. Their cars are kept as standalone cars."""
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"deleted": await delete_managers()}
        }


class ManagerAuthView(BaseView):
    """
    Exchanges a manager's credentials for a session token.
    """
    url = "/managers/auth"
    name = "manager_auth"

    @docs(summary="Log In As A Manager")
    @expects(AuthenticationSchema())
    @returns(
        no_manager=(JSendSchema(), HTTPStatus.NOT_FOUND),
        bad_password=(JSendSchema(), HTTPStatus.UNAUTHORIZED),
        authenticated=JSendSchema.of(token=TokenSchema())
    )
    async def post(self):
        """
        Checks the manager's password, returning a bearer token to be sent in the
        ``Authorization`` header of any request that changes the manager or their fleet.
        """
        email, password = self.request["data"]["email"], self.request["data"]["password"]
        try:
            token = await self.credential_store.authenticate(email, password)
        except NotFoundError:
            return "no_manager", fail("There is no manager with that email.")
        except InvalidCredentialsError:
            return "bad_password", fail("The password is incorrect.")

        return "authenticated", {
            "status": JSendStatus.SUCCESS,
            "data": {"token": {
                "token": token,
                "expires_at": datetime.now(timezone.utc) + self.credential_store.lifetime,
                "manager": email,
            }}
        }


class ManagerView(BaseView):
    """
    Gets, replaces, updates or deletes a single manager.
    """
    url = f"/managers/{MANAGER_IDENTIFIER}"
    name = "manager"
    with_manager = match_getter(get_manager, "manager", email="email")

    @with_manager
    @docs(summary="Get A Manager")
    @returns(JSendSchema.of(manager=ManagerSchema()))
    async def get(self, manager: Manager):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"manager": manager.serialize(self.base_url)}
        }

    @with_manager
    @docs(summary="Replace A Manager")
    @requires(ValidToken() & ManagerMatchesToken())
    @expects(ManagerRegisterSchema())
    @returns(
        email_taken=(JSendSchema(), HTTPStatus.CONFLICT),
        updated=JSendSchema.of(manager=ManagerSchema())
    )
    async def put(self, manager: Manager):
        try:
            manager = await self.credential_store.replace_credentials(manager, **self.request["data"])
        except ConflictError as error:
            return "email_taken", fail("That email is in use by another manager.", errors=error.errors)

        return "updated", {
            "status": JSendStatus.SUCCESS,
            "data": {"manager": manager.serialize(self.base_url)}
        }

    @with_manager
    @docs(summary="Update A Manager")
    @requires(ValidToken() & ManagerMatchesToken())
    @expects(ManagerRegisterSchema(partial=True))
    @returns(
        email_taken=(JSendSchema(), HTTPStatus.CONFLICT),
        updated=JSendSchema.of(manager=ManagerSchema())
    )
    async def patch(self, manager: Manager):
        try:
            manager = await self.credential_store.update_credentials(manager, **self.request["data"])
        except ConflictError as error:
            return "email_taken", fail("That email is in use by another manager.", errors=error.errors)

        return "updated", {
            "status": JSendStatus.SUCCESS,
            "data": {"manager": manager.serialize(self.base_url)}
        }

    @with_manager
    @docs(summary="Delete A Manager")
    @requires(ValidToken() & ManagerMatchesToken())
    @returns(JSendSchema.of(manager=ManagerSchema()))
    async def delete(self, manager: Manager):
        """Deletes the manager. The cars in their fleet are kept as standalone cars."""
        await self.fleet_manager.delete_manager(manager)
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"manager": manager.serialize()}
        }


class ManagerCarsView(BaseView):
    """
    Gets or adds to the cars in a manager's fleet.
    """
    url = f"/managers/{MANAGER_IDENTIFIER}/cars"
    name = "manager_cars"
    with_manager = match_getter(get_manager, "manager", email="email")

    @with_manager
    @docs(summary="Get All Cars For Manager")
    @returns(JSendSchema.of(cars=Many(CarSchema())))
    async def get(self, manager: Manager):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"cars": [car.serialize(self.base_url) for car in await get_manager_cars(manager)]}
        }

    @with_manager
    @docs(summary="Add A Car To Manager")
    @requires(ValidToken() & ManagerMatchesToken())
    @expects(CarWriteSchema())
    @returns(
        car_exists=(JSendSchema(), HTTPStatus.CONFLICT),
        created=(JSendSchema.of(car=CarSchema()), HTTPStatus.CREATED)
    )
    async def post(self, manager: Manager):
        try:
            car = await self.fleet_manager.create_car(manager, **self.request["data"])
        except ConflictError as error:
            return "car_exists", fail("A car with this registration already exists.", errors=error.errors)

        return "created", {
            "status": JSendStatus.SUCCESS,
            "data": {"car": car.serialize(self.base_url)}
        }


class ManagerCarView(BaseView):
    """
    Gets, updates or removes one of the cars in a manager's fleet.
    """
    url = f"/managers/{MANAGER_IDENTIFIER}/cars/{{registration}}"
    name = "manager_car"
    with_car = match_getter(get_manager_and_car, "manager", "car", email="email", registration="registration")

    @with_car
    @docs(summary="Get A Car For Manager")
    @returns(JSendSchema.of(car=CarSchema()))
    async def get(self, manager: Manager, car: Car):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"car": car.serialize(self.base_url)}
        }

    @with_car
    @docs(summary="Update A Car For Manager")
    @requires(ValidToken() & ManagerMatchesToken())
    @expects(CarWriteSchema(partial=True))
    @returns(
        registration_taken=(JSendSchema(), HTTPStatus.CONFLICT),
        updated=JSendSchema.of(car=CarSchema())
    )
    async def patch(self, manager: Manager, car: Car):
        try:
            car = await update_car(car, partial=True, **self.request["data"])
        except ConflictError as error:
            return "registration_taken", fail("That registration belongs to another car.", errors=error.errors)

        return "updated", {
            "status": JSendStatus.SUCCESS,
            "data": {"car": car.serialize(self.base_url)}
        }

    @with_car
    @docs(summary="Remove A Car From Manager")
    @requires(ValidToken() & ManagerMatchesToken())
    @returns(JSendSchema.of(car=CarSchema()))
    async def delete(self, manager: Manager, car: Car):
        """Deletes the car and its bookings, and removes it from the manager's fleet."""
        await self.fleet_manager.delete_car(car, manager)
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"car": car.serialize()}
        }
