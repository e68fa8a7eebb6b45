"""
Link Manager
------------

Maintains the denormalized lists of child ids kept on parent documents:

- a :class:`~gocargo.models.Manager` lists the ids of the cars it owns
- a :class:`~gocargo.models.User` lists the ids of its bookings

These lists are redundant storage, so every change to the children has to
be mirrored here with a second write. Each change is a read-modify-write of
the parent's list, so two concurrent changes to the same parent could
otherwise overwrite each other. To prevent that, every change to a given
parent happens under a lock held for that parent, and the parent is read
fresh from the database once the lock is held.

Responsibilities
================

- add a child id to a parent's list, at most once
- remove a child id from a parent's list
- repair lists that drifted from the children that actually exist
"""
import asyncio
from collections import defaultdict
from typing import Callable, List, MutableMapping, Tuple, Type, Union
from weakref import WeakValueDictionary

from tortoise import Model

from gocargo import logger
from gocargo.models import Manager, User, Booking, Car
from gocargo.service.errors import NotFoundError
from gocargo.service.rebuildable import Rebuildable

Parent = Union[Manager, User]


class LinkManager(Rebuildable):

    def __init__(self):
        self._locks: MutableMapping[Tuple[str, int], asyncio.Lock] = WeakValueDictionary()
        """
        Maps a parent (model name, id) to the lock guarding its list. A lock
        is only kept while some change to that parent holds or awaits it.
        """

    async def link_car(self, manager: Union[Manager, str], car_id: int) -> Manager:
        """Adds a car to a manager's list of cars. Adding it twice has no effect."""
        manager = await self._resolve(Manager, manager)
        return await self._change(manager, "car_ids", lambda ids: ids if car_id in ids else ids + [car_id])

    async def unlink_car(self, manager: Union[Manager, str], car_id: int) -> Manager:
        """Removes a car from a manager's list of cars, if it is there."""
        manager = await self._resolve(Manager, manager)
        return await self._change(manager, "car_ids", lambda ids: [cid for cid in ids if cid != car_id])

    async def link_booking(self, user: Union[User, str], booking_id: int) -> User:
        """Adds a booking to a user's list of bookings. Adding it twice has no effect."""
        user = await self._resolve(User, user)
        return await self._change(user, "booking_ids", lambda ids: ids if booking_id in ids else ids + [booking_id])

    async def unlink_booking(self, user: Union[User, str], booking_id: int) -> User:
        """Removes a booking from a user's list of bookings, if it is there."""
        user = await self._resolve(User, user)
        return await self._change(user, "booking_ids", lambda ids: [bid for bid in ids if bid != booking_id])

    async def unlink_car_everywhere(self, car_id: int) -> List[Manager]:
        """Removes a car from the list of every manager that holds it."""
        managers = [manager for manager in await Manager.all() if car_id in manager.car_ids]
        return [await self.unlink_car(manager, car_id) for manager in managers]

    async def clear_car_links(self):
        """Empties every manager's list of cars."""
        for manager in await Manager.all():
            await self._change(manager, "car_ids", lambda ids: [])

    async def clear_booking_links(self):
        """Empties every user's list of bookings."""
        for user in await User.all():
            await self._change(user, "booking_ids", lambda ids: [])

    async def clear_booking_links_for(self, user: Union[User, str]) -> User:
        """Empties a single user's list of bookings."""
        user = await self._resolve(User, user)
        return await self._change(user, "booking_ids", lambda ids: [])

    async def reconcile(self) -> int:
        """
        Brings every list back in line with the children that exist:
        ids of deleted children are dropped, and bookings missing
        from their user's list are added to it.

        :return: The number of lists that had to be repaired.
        """
        car_ids = set(await Car.all().values_list("id", flat=True))
        bookings_by_user = defaultdict(list)
        for booking_id, user_id in await Booking.all().order_by("id").values_list("id", "user_id"):
            bookings_by_user[user_id].append(booking_id)

        repaired = 0

        for manager in await Manager.all():
            if any(cid not in car_ids for cid in manager.car_ids):
                await self._change(manager, "car_ids", lambda ids: [cid for cid in ids if cid in car_ids])
                repaired += 1

        for user in await User.all():
            owned = bookings_by_user[user.id]

            def repair(ids, owned=owned):
                kept = [bid for bid in ids if bid in owned]
                return kept + [bid for bid in owned if bid not in kept]

            if repair(list(user.booking_ids)) != list(user.booking_ids):
                await self._change(user, "booking_ids", repair)
                repaired += 1

        if repaired:
            logger.warning("Repaired %s drifted reference lists", repaired)

        return repaired

    async def _rebuild(self):
        await self.reconcile()

    async def _change(self, parent: Parent, field: str, change: Callable[[List[int]], List[int]]) -> Parent:
        """
        Applies a change to a list on the parent while holding the parent's lock.

        :param parent: The parent holding the list. Only its type and id are used.
        :param field: The name of the list field.
        :param change: Given the current list, returns the new list.
        """
        model = type(parent)
        async with self._lock_for(model.__name__, parent.id):
            fresh = await model.filter(id=parent.id).first()
            if fresh is None:
                raise NotFoundError(model.__name__.lower(), id=parent.id)

            current = list(getattr(fresh, field))
            updated = change(current)
            if updated != current:
                setattr(fresh, field, updated)
                await fresh.save(update_fields=[field])

        return fresh

    def _lock_for(self, model_name: str, parent_id: int) -> asyncio.Lock:
        key = (model_name, parent_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    @staticmethod
    async def _resolve(model: Type[Model], target: Union[Model, str]) -> Parent:
        """Resolves an email to the parent document it belongs to."""
        if isinstance(target, model):
            return target

        parent = await model.filter(email=target).first()
        if parent is None:
            raise NotFoundError(model.__name__.lower(), email=target)
        return parent
