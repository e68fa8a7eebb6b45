"""
JSend Schema
------------

Every JSON response of the api is wrapped in the `JSend`_ envelope:

- ``success`` carries the result in ``data``
- ``fail`` is the client's fault, and explains why in ``data.message``
- ``error`` is ours, and explains why in ``message``

.. _`JSend`: https://github.com/omniti-labs/jsend
"""

from enum import Enum
from typing import Any, Dict

from marshmallow import Schema, fields, validates_schema, ValidationError
from marshmallow.fields import Field

from .fields import EnumField


class JSendStatus(str, Enum):
    SUCCESS = "success"
    FAIL = "fail"
    ERROR = "error"


class JSendSchema(Schema):
    """The envelope around every response, with untyped ``data``."""

    status = EnumField(JSendStatus, required=True)
    data = fields.Dict()
    message = fields.String()
    code = fields.Integer()

    @validates_schema
    def assert_fields(self, data, **kwargs):
        """Checks that each status comes with the fields it needs."""
        status = data["status"]

        if status in (JSendStatus.SUCCESS, JSendStatus.FAIL) and "data" not in data:
            raise ValidationError(f"When status is {status.value}, the data field must be populated.")

        if status == JSendStatus.FAIL and "message" not in data["data"]:
            raise ValidationError("All failures must return user-friendly error message.")

        if status == JSendStatus.ERROR and "message" not in data:
            raise ValidationError(f"When status is {status.value}, the message field must be populated.")

    @staticmethod
    def of(**kwargs):
        """
        Builds an envelope whose ``data`` has the given fields. Schemas are nested,
        and fields are used as they are.

        >>> response_schema = JSendSchema.of(car=CarSchema(), deleted=Integer())
        >>> response_schema.load(await response.json())
        """

        DataSchema = type('DataSchema', (Schema,), {
            field_name: value if isinstance(value, Field) else fields.Nested(value)
            for field_name, value in kwargs.items()
        })

        class TypedJSendSchema(JSendSchema):
            data = fields.Nested(DataSchema)

        return TypedJSendSchema()


def fail(message: str, **data) -> Dict[str, Any]:
    """Builds the body of a failed (client error) response."""
    return {
        "status": JSendStatus.FAIL,
        "data": {"message": message, **data}
    }
