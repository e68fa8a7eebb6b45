from gocargo.models import Manager, Car
from gocargo.service.access.managers import get_managers, get_manager, get_manager_cars, get_manager_car, \
    delete_managers


async def test_get_manager(random_manager):
    assert random_manager in await get_managers()
    assert random_manager == await get_manager(email=random_manager.email)
    assert await get_manager() is None


async def test_get_manager_cars_keeps_order(link_manager, random_manager, random_car_factory):
    cars = [await random_car_factory() for _ in range(3)]
    for car in reversed(cars):
        await link_manager.link_car(random_manager, car.id)

    manager = await get_manager(email=random_manager.email)
    assert await get_manager_cars(manager) == list(reversed(cars))


async def test_get_manager_car(random_manager_car, random_manager, random_car):
    manager = await get_manager(email=random_manager.email)
    assert await get_manager_car(manager, random_manager_car.registration) == random_manager_car
    assert await get_manager_car(manager, random_car.registration) is None


async def test_get_manager_cars_empty(random_manager):
    assert await get_manager_cars(random_manager) == []


async def test_delete_managers_keeps_cars(random_manager_car):
    assert await delete_managers() == 1
    assert await Manager.all().count() == 0
    assert await Car.all().count() == 1
