"""
Errors
------

The failures the service layer signals to its callers. Each of them is
expected, and is turned into a structured response by the views.
"""

from typing import Dict


class ServiceError(Exception):
    pass


class NotFoundError(ServiceError):
    """Raised when a business key does not resolve to a document."""

    def __init__(self, entity: str, **params):
        super().__init__(f"{entity.capitalize()} not found.")
        self.entity = entity
        self.params = params


class ConflictError(ServiceError):
    """Raised when creating or renaming a document would duplicate a business key."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__(*errors.values())
        self.errors = errors


class InvalidCredentialsError(ServiceError):
    pass


def unique_violations(error: Exception, message: str) -> Dict[str, str]:
    """
    Picks the offending field names out of a database integrity error.

    :param error: The :class:`~tortoise.exceptions.IntegrityError` raised by the database.
    :param message: The message to attach to each violated field.
    """
    errors = {}
    for sub_error in (error, *error.args):
        for text in getattr(sub_error, "args", (sub_error,)):
            if isinstance(text, str) and "unique" in text.lower():
                field = text.split('.')[-1].strip()
                errors[field] = message
    return errors
