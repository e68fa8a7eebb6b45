"""
Cars
----
"""
import base64
from typing import List, Optional, Tuple

from tortoise.exceptions import IntegrityError

from gocargo.models import Car
from gocargo.serializer.fields import DATA_URL_REGEX
from gocargo.service.errors import ConflictError, unique_violations

CAR_FIELDS = ("registration", "brand", "color", "price", "description", "image")
SORT_ORDERS = {"asc": "price", "desc": "-price"}


async def get_cars(*, color: str = None, brand: str = None, order: str = None) -> List[Car]:
    """
    Gets all the cars in the system.

    :param color: An optional color to filter by.
    :param brand: An optional brand to filter by.
    :param order: Sort by price, either ``asc`` or ``desc``.
    """
    query = Car.all()

    if color is not None:
        query = query.filter(color=color)

    if brand is not None:
        query = query.filter(brand=brand)

    if order is not None:
        query = query.order_by(SORT_ORDERS[order], "id")

    return await query


async def get_car(*, registration: str = None, car_id: int = None) -> Optional[Car]:
    """
    :param registration: The registration of the car to get.
    :param car_id: The internal id of the car to get.
    :return: The matching car, or None.
    """

    kwargs = {}
    if registration is not None:
        kwargs["registration"] = registration

    if car_id is not None:
        kwargs["id"] = car_id

    if not kwargs:
        return None

    return await Car.filter(**kwargs).first()


async def create_car(registration: str, **fields) -> Car:
    """
    Creates a standalone car.

    :raises ConflictError: When a car with that registration already exists.
    """
    if await get_car(registration=registration) is not None:
        raise ConflictError({"registration": "Car already exists."})

    try:
        return await Car.create(registration=registration, **fields)
    except IntegrityError as error:
        errors = unique_violations(error, "Car already exists.")
        if not errors:
            raise error
        raise ConflictError(errors)


async def update_car(car: Car, *, partial=False, **fields) -> Car:
    """
    Updates a car.

    :param partial: When false, every field not supplied is reset to its default.
    :raises ConflictError: When the new registration belongs to another car.
    """
    registration = fields.get("registration")
    if registration is not None and registration != car.registration:
        if await get_car(registration=registration) is not None:
            raise ConflictError({"registration": "Car registration already in use."})

    for key in CAR_FIELDS:
        if key in fields:
            setattr(car, key, fields[key])
        elif not partial and key != "registration":
            setattr(car, key, Car._meta.fields_map[key].default)

    try:
        await car.save()
    except IntegrityError as error:
        errors = unique_violations(error, "Car registration already in use.")
        if not errors:
            raise error
        raise ConflictError(errors)

    return car


async def delete_car(car: Car):
    await car.delete()


async def delete_cars() -> int:
    """Deletes every car, returning how many were removed."""
    return await Car.all().delete()


def decode_image(car: Car) -> Optional[Tuple[bytes, str]]:
    """
    Decodes the image of a car.

    :return: The raw image and its content type, or None if the car has no image.
    """
    if not car.image:
        return None

    match = DATA_URL_REGEX.match(car.image)
    if match is None:
        return None

    return base64.b64decode(match.group("data")), match.group("content_type") or "image/png"
