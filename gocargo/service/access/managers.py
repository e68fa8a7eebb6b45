"""
Managers
--------
"""
from typing import List, Optional

from gocargo.models import Manager, Car


async def get_managers() -> List[Manager]:
    return await Manager.all()


async def get_manager(*, email: str = None, manager_id: int = None) -> Optional[Manager]:
    """
    :param email: The email of the manager to get.
    :param manager_id: The internal id of the manager to get.
    :return: The matching manager, or None.
    """

    kwargs = {}
    if email is not None:
        kwargs["email"] = email

    if manager_id is not None:
        kwargs["id"] = manager_id

    if not kwargs:
        return None

    return await Manager.filter(**kwargs).first()


async def get_manager_cars(manager: Manager) -> List[Car]:
    """Resolves the manager's list of car ids, in the order they were added."""
    if not manager.car_ids:
        return []

    cars = {car.id: car for car in await Car.filter(id__in=manager.car_ids)}
    return [cars[cid] for cid in manager.car_ids if cid in cars]


async def get_manager_car(manager: Manager, registration: str) -> Optional[Car]:
    """Gets one of the manager's cars by its registration."""
    if not manager.car_ids:
        return None

    return await Car.filter(id__in=manager.car_ids, registration=registration).first()


async def delete_manager(manager: Manager):
    await manager.delete()


async def delete_managers() -> int:
    """Deletes every manager, returning how many were removed."""
    return await Manager.all().delete()
