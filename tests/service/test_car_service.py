import base64

import pytest

from gocargo.models import Car
from gocargo.service import ConflictError
from gocargo.service.access.cars import get_cars, get_car, create_car, update_car, delete_cars, decode_image

PIXEL = base64.b64encode(b"\x89PNG\r\n\x1a\n").decode()


async def test_get_car(random_car):
    assert random_car == await get_car(registration=random_car.registration)
    assert random_car == await get_car(car_id=random_car.id)
    assert await get_car(registration="NOPE") is None


async def test_create_car_duplicate(random_car):
    with pytest.raises(ConflictError) as error:
        await create_car(random_car.registration, brand="Fiat")
    assert "registration" in error.value.errors


async def test_filter_cars(random_car_factory):
    red_fiat = await random_car_factory(brand="Fiat", color="red")
    await random_car_factory(brand="Fiat", color="blue")
    await random_car_factory(brand="Ford", color="red")

    assert len(await get_cars(brand="Fiat")) == 2
    assert len(await get_cars(color="red")) == 2
    assert await get_cars(brand="Fiat", color="red") == [red_fiat]


async def test_sort_cars(random_car_factory):
    for price in (50.0, 10.0, 30.0):
        await random_car_factory(price=price)

    assert [car.price for car in await get_cars(order="asc")] == [10.0, 30.0, 50.0]
    assert [car.price for car in await get_cars(order="desc")] == [50.0, 30.0, 10.0]


async def test_update_car_partial(random_car):
    car = await update_car(random_car, partial=True, price=999.0)
    assert car.price == 999.0
    assert car.brand == random_car.brand


async def test_update_car_full(random_car):
    """Assert that a full update resets the fields it is not given."""
    car = await update_car(random_car, registration=random_car.registration, price=12.0)
    assert car.price == 12.0
    assert car.brand == ""
    assert car.image is None


async def test_update_car_registration_clash(random_car_factory):
    first, second = await random_car_factory(), await random_car_factory()
    with pytest.raises(ConflictError):
        await update_car(second, partial=True, registration=first.registration)


async def test_delete_cars(random_car_factory):
    await random_car_factory()
    await random_car_factory()
    assert await delete_cars() == 2
    assert await Car.all().count() == 0


async def test_decode_image(random_car_factory):
    car = await random_car_factory(image=f"data:image/png;base64,{PIXEL}")
    assert decode_image(car) == (b"\x89PNG\r\n\x1a\n", "image/png")


async def test_decode_no_image(random_car):
    assert decode_image(random_car) is None
