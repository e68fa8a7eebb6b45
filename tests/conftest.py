from datetime import date

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient
from faker import Faker
from tortoise import Tortoise

from gocargo.config import api_root
from gocargo.middleware import error_middleware, validate_token_middleware
from gocargo.models import User, Manager, Car, Booking
from gocargo.service.access.cars import create_car
from gocargo.service.access.users import create_user
from gocargo.service.credentials import CredentialStore
from gocargo.service.manager.booking_manager import BookingManager
from gocargo.service.manager.fleet_manager import FleetManager
from gocargo.service.manager.link_manager import LinkManager
from gocargo.signals import register_signals
from gocargo.views import register_views

fake = Faker()

PASSWORD = "correct horse battery"
SECRET = "a-secret-for-tests"
BASE_URL = "http://localhost:8080/api/v1"


def random_registration() -> str:
    return fake.unique.bothify("??##???").upper()


@pytest.fixture
async def database():
    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={'models': ['gocargo.models']}
    )
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def credential_store() -> CredentialStore:
    return CredentialStore(SECRET)


@pytest.fixture
def link_manager(database) -> LinkManager:
    return LinkManager()


@pytest.fixture
def booking_manager(link_manager) -> BookingManager:
    return BookingManager(link_manager)


@pytest.fixture
def fleet_manager(link_manager, booking_manager) -> FleetManager:
    return FleetManager(link_manager, booking_manager)


@pytest.fixture
async def client(
    aiohttp_client, database, credential_store, link_manager, booking_manager, fleet_manager
) -> TestClient:
    app = web.Application(middlewares=[error_middleware, validate_token_middleware])

    app['credential_store'] = credential_store
    app['link_manager'] = link_manager
    app['booking_manager'] = booking_manager
    app['fleet_manager'] = fleet_manager
    app['base_url'] = BASE_URL

    register_signals(app, init_database=False)  # we get the database from a fixture
    register_views(app, api_root)

    return await aiohttp_client(app)


@pytest.fixture
def random_user_factory(database):
    async def create():
        return await create_user(fake.unique.email(), PASSWORD, fake.first_name(), fake.last_name())

    return create


@pytest.fixture
def random_manager_factory(database, credential_store):
    async def create():
        return await credential_store.register(
            fake.unique.email(), PASSWORD, first_name=fake.first_name(), last_name=fake.last_name(),
            balance=100.0, address=fake.address()
        )

    return create


@pytest.fixture
def random_car_factory(database):
    async def create(**fields):
        fields.setdefault("brand", fake.random_element(("Ford", "Fiat", "Volvo")))
        fields.setdefault("color", fake.color_name())
        fields.setdefault("price", float(fake.random_int(20, 200)))
        return await create_car(fields.pop("registration", random_registration()), **fields)

    return create


@pytest.fixture
async def random_user(random_user_factory) -> User:
    """Creates a random user in the database."""
    return await random_user_factory()


@pytest.fixture
async def random_manager(random_manager_factory) -> Manager:
    """Creates a random manager (with the password ``PASSWORD``) in the database."""
    return await random_manager_factory()


@pytest.fixture
async def random_car(random_car_factory) -> Car:
    """Creates a random standalone car in the database."""
    return await random_car_factory()


@pytest.fixture
async def random_manager_car(fleet_manager, random_manager) -> Car:
    """Creates a random car in the random manager's fleet."""
    return await fleet_manager.create_car(
        random_manager, random_registration(), brand="Volvo", color="red", price=80.0
    )


@pytest.fixture
async def random_booking(booking_manager, random_user, random_car) -> Booking:
    """Creates a random booking of the random car by the random user."""
    return await booking_manager.create(
        random_user.email, random_car.registration, date(2024, 1, 1), date(2024, 1, 5)
    )


@pytest.fixture
def manager_token(credential_store, random_manager) -> str:
    return credential_store.issue_token(random_manager.email)


@pytest.fixture
def manager_auth(manager_token):
    return {"Authorization": f"Bearer {manager_token}"}
