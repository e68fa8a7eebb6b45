"""
Manager
---------------------------

A manager owns a fleet of cars. Ownership is only recorded on the manager
(``car_ids``); a car has no reference back to its manager.
"""
from typing import Dict, Any

from tortoise import Model, fields

from gocargo.serializer.links import manager_links


class Manager(Model):
    id = fields.IntField(pk=True)
    email = fields.CharField(max_length=255, unique=True)

    first_name = fields.CharField(max_length=255)
    last_name = fields.CharField(max_length=255)
    password_hash = fields.CharField(max_length=128)

    balance = fields.FloatField(default=0)
    address = fields.CharField(max_length=255, default="")

    car_ids = fields.JSONField(default=list)

    def serialize(self, base_url: str = None) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "balance": self.balance,
            "address": self.address,
            "cars": list(self.car_ids),
        }

        if base_url is not None:
            data["links"] = manager_links(base_url, self.email)

        return data

    def __str__(self):
        return f"[{self.id}] {self.first_name} {self.last_name} ({self.email})"
