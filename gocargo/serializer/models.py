"""
Model Serializers
-----------------

Defines serializers for the various models in the system. Wire names follow
the conventions of the existing web client (``fname``, ``bookingReference``...),
which are mapped onto the model attribute names with ``data_key``.
"""

from marshmallow import Schema, validates_schema, ValidationError
from marshmallow.fields import Integer, String, Email, Nested, Date, Float, List, Dict, Url
from marshmallow.validate import Length, Range

from gocargo.models import BookingStatus
from .fields import DataUrl, EnumField


class LinkSchema(Schema):
    href = Url(required=True, require_tld=False)


def Links():
    return Dict(keys=String(), values=Nested(LinkSchema()))


class UserSchema(Schema):
    """The schema corresponding to the :class:`~gocargo.models.user.User` model."""

    id = Integer()
    email = Email(required=True)
    first_name = String(required=True, data_key="fname", validate=Length(min=1))
    last_name = String(required=True, data_key="lname", validate=Length(min=1))
    bookings = List(Integer())
    links = Links()


class ManagerSchema(Schema):
    """The schema corresponding to the :class:`~gocargo.models.manager.Manager` model."""

    id = Integer()
    email = Email(required=True)
    first_name = String(required=True, data_key="fname", validate=Length(min=1))
    last_name = String(required=True, data_key="lname", validate=Length(min=1))
    balance = Float()
    address = String()
    cars = List(Integer())
    links = Links()


class CarSchema(Schema):
    id = Integer()
    registration = String(required=True, validate=Length(min=1, max=32))
    brand = String()
    color = String()
    price = Float(validate=Range(min=0))
    description = String()
    image = DataUrl(allow_none=True)
    links = Links()


class BookingSchema(Schema):
    id = Integer()
    reference = String(data_key="bookingReference", validate=Length(min=1, max=64))

    user = Nested(UserSchema())
    car = Nested(CarSchema())

    start_date = Date(required=True, data_key="startDate")
    end_date = Date(required=True, data_key="endDate")
    status = EnumField(BookingStatus)
    content = String()
    links = Links()

    @validates_schema
    def assert_dates_ordered(self, data, **kwargs):
        """Asserts that a booking does not end before it starts."""
        if "start_date" in data and "end_date" in data and data["end_date"] < data["start_date"]:
            raise ValidationError("The end date may not be before the start date.", "endDate")
