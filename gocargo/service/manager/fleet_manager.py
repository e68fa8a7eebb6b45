"""
Fleet Manager
=============

Handles the lifecycle of cars that are (or were) owned by a manager.

Cars live in their own collection, while each manager keeps a list of the
ids of the cars they own. Every operation here keeps that list, and the
bookings made on a car, in step with the cars themselves.
"""
from typing import Optional

from gocargo import logger
from gocargo.models import Car, Manager
from gocargo.service.access.cars import create_car, delete_cars
from gocargo.service.access.managers import delete_manager
from gocargo.service.manager.booking_manager import BookingManager
from gocargo.service.manager.link_manager import LinkManager


class FleetManager:

    def __init__(self, link_manager: LinkManager, booking_manager: BookingManager):
        self._link_manager = link_manager
        self._booking_manager = booking_manager

    async def create_car(self, manager: Manager, registration: str, **fields) -> Car:
        """
        Creates a car and adds it to the manager's fleet. If the car can't
        be added to the fleet, it is deleted again.

        :raises ConflictError: If the registration is taken.
        """
        car = await create_car(registration, **fields)

        try:
            await self._link_manager.link_car(manager, car.id)
        except Exception:
            logger.exception("Could not add car %s to manager %s, removing it", car.id, manager.id)
            await car.delete()
            raise

        logger.info("Manager %s added car %s", manager.id, car.id)
        return car

    async def delete_car(self, car: Car, manager: Optional[Manager] = None):
        """
        Deletes a car along with its bookings.

        :param manager: The manager whose fleet the car is removed from.
            If omitted, it is removed from every manager that lists it.
        """
        removed = await self._booking_manager.delete_for_car(car)
        await car.delete()

        if manager is not None:
            await self._link_manager.unlink_car(manager, car.id)
        else:
            await self._link_manager.unlink_car_everywhere(car.id)

        logger.info("Removed car %s and its %s bookings", car.id, removed)

    async def delete_all_cars(self) -> int:
        """Deletes every car and every booking, emptying every fleet."""
        await self._booking_manager.delete_all()
        count = await delete_cars()
        await self._link_manager.clear_car_links()
        logger.info("Removed all %s cars", count)
        return count

    async def delete_manager(self, manager: Manager):
        """Deletes a manager. Their cars stay behind as standalone cars."""
        await delete_manager(manager)
        logger.info("Removed manager %s, leaving %s standalone cars", manager.id, len(manager.car_ids))
