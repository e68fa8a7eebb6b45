"""
Booking
---------------------------

A booking reserves a car for a user over a range of dates. It is addressed
externally by its booking reference, which is either supplied by the client
or generated by the :class:`~gocargo.service.manager.booking_manager.BookingManager`.
"""
from enum import Enum
from typing import Dict, Any

from tortoise import Model, fields

from gocargo.models.fields import EnumField
from gocargo.serializer.links import booking_links


class BookingStatus(str, Enum):
    """We subclass string to make json serialization work."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Booking(Model):
    id = fields.IntField(pk=True)
    reference = fields.CharField(max_length=64, unique=True)

    user = fields.ForeignKeyField("models.User", related_name="bookings")
    car = fields.ForeignKeyField("models.Car", related_name="bookings")

    start_date = fields.DateField()
    end_date = fields.DateField()
    status = EnumField(BookingStatus, default=BookingStatus.PENDING)
    content = fields.TextField(default="")

    def serialize(self, base_url: str = None, *, scoped_to_user=False) -> Dict[str, Any]:
        """
        Serializes the booking along with its (fetched) user and car.

        :param base_url: When given, a ``links`` map is attached.
        :param scoped_to_user: Whether the self link should point at the user's copy of the booking.
        """
        data = {
            "id": self.id,
            "reference": self.reference,
            "user": self.user.serialize(),
            "car": self.car.serialize(),
            "start_date": self.start_date,
            "end_date": self.end_date,
            "status": self.status,
            "content": self.content,
        }

        if base_url is not None:
            data["links"] = booking_links(
                base_url, self.reference, user_email=self.user.email if scoped_to_user else None
            )

        return data

    def __str__(self):
        return f"[{self.id}] {self.reference}"
