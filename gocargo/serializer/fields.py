"""
Fields
-------

Fields for the values marshmallow has no built-in field for: enums, and
binary payloads sent as data urls.
"""

import base64
import binascii
import re
from enum import Enum
from typing import Union, Optional, Type

from marshmallow import fields, ValidationError

DATA_URL_REGEX = re.compile(r"^data:(?P<content_type>[\w.+-]+/[\w.+-]+)?(?:;[\w-]+=[\w.-]+)*;base64,(?P<data>.*)$", re.S)


class DataUrl(fields.String):
    """
    A field for binary payloads sent inside JSON as a ``data:`` url, for example
    ``data:image/png;base64,iVBORw0KGgo...``. The url is kept as a string, but
    it is rejected if the base64 section does not decode.
    """

    def _deserialize(self, value, attr, data, **kwargs) -> str:
        value = super()._deserialize(value, attr, data, **kwargs)
        match = DATA_URL_REGEX.match(value)
        if match is None:
            raise ValidationError("Not a valid base64 data url.")

        try:
            base64.b64decode(match.group("data"), validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError("The data url does not contain valid base64.")

        return value

    def _jsonschema_type_mapping(self):
        """Defines the jsonschema type for the object."""
        return {
            'type': 'string',
            'format': 'data-url',
        }


class EnumField(fields.Field):
    """Dumps an :class:`~enum.Enum` member as its value, and loads it back from the value."""

    def __init__(self, enum_type: Type[Enum], *args, **kwargs):
        super().__init__(*args, **kwargs)
        if not issubclass(enum_type, Enum):
            raise TypeError(f"Expected enum type, got {enum_type!r} instead")
        self._enum_type = enum_type

    def _serialize(self, value: Union[Enum, str, None], attr, obj, **kwargs) -> Optional[str]:
        if value is None:
            return None
        try:
            return self._enum_type(value).value
        except ValueError:
            return None

    def _deserialize(self, value, attr, data, **kwargs) -> Enum:
        try:
            return self._enum_type(value)
        except ValueError:
            raise ValidationError(f"Must be one of {', '.join(str(member.value) for member in self._enum_type)}.")

    def _jsonschema_type_mapping(self):
        return {
            'type': 'string',
            'enum': [member.value for member in self._enum_type]
        }


def Many(schema):
    return fields.List(fields.Nested(schema))
