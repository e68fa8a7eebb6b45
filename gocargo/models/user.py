"""
User
---------------------------
"""
from typing import Dict, Any

from tortoise import Model, fields

from gocargo.serializer.links import user_links


class User(Model):
    """
    Represents a customer in the system.

    The ids of the user's bookings are kept on the user in ``booking_ids``.
    The list is redundant storage and is only ever changed through the
    :class:`~gocargo.service.manager.link_manager.LinkManager`.
    """

    id = fields.IntField(pk=True)
    email = fields.CharField(max_length=255, unique=True)

    first_name = fields.CharField(max_length=255)
    last_name = fields.CharField(max_length=255)
    password_hash = fields.CharField(max_length=128)

    booking_ids = fields.JSONField(default=list)

    def serialize(self, base_url: str = None) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "bookings": list(self.booking_ids),
        }

        if base_url is not None:
            data["links"] = user_links(base_url, self.email)

        return data

    def __str__(self):
        return f"[{self.id}] {self.first_name} {self.last_name} ({self.email})"
