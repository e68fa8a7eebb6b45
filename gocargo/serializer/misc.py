"""
Request Serializers
-------------------

Schemas for request bodies that do not map directly onto a model.
"""

from marshmallow import Schema, ValidationError, post_load
from marshmallow.fields import String, Email, DateTime, Float
from marshmallow.validate import Length, OneOf

from gocargo.config import password_max_bytes
from gocargo.models import BookingStatus
from .fields import EnumField
from .models import BookingSchema, CarSchema, ManagerSchema, UserSchema

PASSWORD_LENGTH = Length(min=8, error="Password has to be at least {min} characters.")


def password_fits(value: str):
    """bcrypt only reads the first 72 bytes of a password, so longer ones are refused."""
    if len(value.encode("utf-8")) > password_max_bytes:
        raise ValidationError(f"Password has to be at most {password_max_bytes} bytes.")


class UserRegisterSchema(UserSchema):
    """The schema of the user register (and replace) request."""

    class Meta:
        fields = ("email", "first_name", "last_name", "password")

    password = String(required=True, load_only=True, validate=[PASSWORD_LENGTH, password_fits])


class ManagerRegisterSchema(ManagerSchema):
    """The schema of the manager register (and replace) request."""

    class Meta:
        fields = ("email", "first_name", "last_name", "password", "balance", "address")

    password = String(required=True, load_only=True, validate=[PASSWORD_LENGTH, password_fits])
    balance = Float(load_default=0.0)
    address = String(load_default="")


class AuthenticationSchema(Schema):
    """A manager's login credentials."""

    email = Email(required=True)
    password = String(required=True, load_only=True)


class TokenSchema(Schema):
    token = String(required=True)
    expires_at = DateTime(required=True)
    manager = String(required=True)


class CarWriteSchema(CarSchema):
    """The schema of the car create (and replace) request."""

    class Meta:
        fields = ("registration", "brand", "color", "price", "description", "image")


class CarQuerySchema(Schema):
    """The query string accepted when listing cars."""

    color = String()
    brand = String()
    order = String(data_key="sort", validate=OneOf(("asc", "desc")))


class BookingCreateSchema(BookingSchema):
    """The schema of the booking create request."""

    class Meta:
        fields = ("reference", "user_email", "car_registration", "start_date", "end_date", "status", "content")

    reference = String(data_key="bookingReference", allow_none=True, validate=Length(max=64))
    user_email = Email(required=True, data_key="userEmail")
    car_registration = String(required=True, data_key="carRegistration", validate=Length(min=1))
    status = EnumField(BookingStatus, load_default=BookingStatus.PENDING)
    content = String(load_default="")

    @post_load
    def drop_empty_reference(self, data, **kwargs):
        """An empty reference is treated the same as no reference."""
        if not data.get("reference"):
            data.pop("reference", None)
        return data
