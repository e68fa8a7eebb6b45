"""
Users
-----
"""
from typing import List, Optional

from tortoise.exceptions import IntegrityError

from gocargo.models import User
from gocargo.service.credentials import hash_password
from gocargo.service.errors import ConflictError, unique_violations


async def get_users() -> List[User]:
    return await User.all()


async def get_user(*, email: str = None, user_id: int = None) -> Optional[User]:
    """
    :param email: The email of the user to get.
    :param user_id: The internal id of the user to get.
    :return: The matching user, or None.
    """

    kwargs = {}
    if email is not None:
        kwargs["email"] = email

    if user_id is not None:
        kwargs["id"] = user_id

    if not kwargs:
        return None

    return await User.filter(**kwargs).first()


async def create_user(email: str, password: str, first_name: str, last_name: str) -> User:
    """
    Registers a new user, storing only the hash of their password.

    :raises ConflictError: When the user with the given email already exists.
    """
    if await get_user(email=email) is not None:
        raise ConflictError({"email": "User already exists."})

    try:
        return await User.create(
            email=email, first_name=first_name, last_name=last_name, password_hash=hash_password(password)
        )
    except IntegrityError as error:
        errors = unique_violations(error, "User already exists.")
        if not errors:
            raise error
        raise ConflictError(errors)


async def update_user(user: User, *, email=None, password=None, first_name=None, last_name=None) -> User:
    """
    Updates the supplied fields of the user. A full replacement is simply
    an update that supplies every field.

    :raises ConflictError: When the new email belongs to another user.
    """
    if email is not None and email != user.email:
        existing = await get_user(email=email)
        if existing is not None:
            raise ConflictError({"email": "User email already in use."})
        user.email = email

    if first_name is not None:
        user.first_name = first_name

    if last_name is not None:
        user.last_name = last_name

    if password:
        user.password_hash = hash_password(password)

    try:
        await user.save()
    except IntegrityError as error:
        errors = unique_violations(error, "User email already in use.")
        if not errors:
            raise error
        raise ConflictError(errors)

    return user


async def delete_user(user: User):
    await user.delete()


async def delete_users() -> int:
    """Deletes every user, returning how many were removed."""
    return await User.all().delete()
