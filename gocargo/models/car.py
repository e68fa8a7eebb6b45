"""
Car
-------------------------

A car in the rental fleet, identified externally by its registration.
The image is stored as it is sent to us: a ``data:`` url holding the
base64 encoded picture.
"""
from typing import Dict, Any

from tortoise import Model, fields

from gocargo.serializer.links import car_links


class Car(Model):
    id = fields.IntField(pk=True)
    registration = fields.CharField(max_length=32, unique=True)

    brand = fields.CharField(max_length=255, default="")
    color = fields.CharField(max_length=64, default="")
    price = fields.FloatField(default=0)
    description = fields.TextField(default="")
    image = fields.TextField(null=True)

    def serialize(self, base_url: str = None) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "registration": self.registration,
            "brand": self.brand,
            "color": self.color,
            "price": self.price,
            "description": self.description,
            "image": self.image,
        }

        if base_url is not None:
            data["links"] = car_links(base_url, self.registration)

        return data

    def __str__(self):
        return f"[{self.id}] {self.brand} ({self.registration})"
