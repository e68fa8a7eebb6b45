"""
Permission
----------

Permissions are checks run before a route handler. They can be combined
with ``&``, in which case all of them must pass:

.. code:: python

    @requires(ValidToken() & ManagerMatchesToken())
    async def patch(self, manager: Manager):
        ...
"""

from abc import ABC, abstractmethod
from itertools import chain
from typing import List, Tuple

from aiohttp.web_urldispatcher import View


class RoutePermissionError(Exception):
    """
    Raised when a permission is not met. A composite permission collects the
    errors of its parts as ``sub_errors``, joined by its ``qualifier``.
    """

    def __init__(self, *messages, qualifier=None, sub_errors: List['RoutePermissionError'] = None):
        if messages and (qualifier is not None or sub_errors is not None):
            raise ValueError("RoutePermissionError may either return a message or sub errors.")

        super().__init__(*messages)
        self.messages = messages
        self.sub_errors = sub_errors if sub_errors is not None else []
        self.qualifier = qualifier

    def __str__(self):
        """Builds a sentence out of the messages, for example "a, b and c"."""
        parts = [m.lower().strip(".") for m in self.messages]
        parts += [str(error) for error in self.sub_errors]

        if len(parts) > 1 and self.qualifier is not None:
            return f"{', '.join(parts[:-1])} {self.qualifier} {parts[-1]}"
        return ", ".join(parts)

    def serialize(self) -> List[str]:
        """Flattens the messages of the error and all of its sub-errors."""
        return list(self.messages) + list(chain.from_iterable(err.serialize() for err in self.sub_errors))


class Permission(ABC):
    """
    The base class for permissions.
    """

    def __and__(self, other):
        return AndPermission(*self._flatten(self, other))

    @staticmethod
    def _flatten(*permissions) -> Tuple['Permission', ...]:
        """Merges nested conjunctions, so that ``a & b & c`` is a single check."""
        flattened = []
        for permission in permissions:
            if isinstance(permission, AndPermission):
                flattened += permission.permissions
            else:
                flattened.append(permission)
        return tuple(flattened)

    @abstractmethod
    async def __call__(self, view: View, **kwargs) -> None:
        """
        Evaluates the permission object.

        :raises RoutePermissionError: If the permission failed.
        """


class AndPermission(Permission):
    """Passes when every one of its permissions pass."""

    def __init__(self, *permissions: Permission):
        self.permissions = permissions

    async def __call__(self, view, **kwargs):
        errors = []

        for permission in self.permissions:
            try:
                await permission(view, **kwargs)
            except RoutePermissionError as error:
                errors.append(error)

        if errors:
            raise RoutePermissionError(qualifier="and", sub_errors=errors)

    def __repr__(self):
        return "(" + " & ".join(repr(p) for p in self.permissions) + ")"

