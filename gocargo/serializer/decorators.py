"""
Decorators
----------

The routes never touch raw JSON. Incoming bodies are checked against a
schema by :func:`expects` before the handler runs, and whatever the handler
returns is dumped through a schema by :func:`returns`.

.. note:: ``@expects(None)`` and ``@returns(None)`` do nothing, and are
    only there to make a route's contract explicit.
"""

from functools import wraps
from http import HTTPStatus
from json import JSONDecodeError
from typing import Optional, Tuple, Union, Dict

from aiohttp import web
from aiohttp.web_urldispatcher import View
from marshmallow import Schema, ValidationError
from marshmallow_jsonschema import JSONSchema

from gocargo.serializer.jsend import JSendSchema, JSendStatus, fail

NamedSchema = Union[Schema, Tuple[Schema, HTTPStatus]]


def _bad_request(message: str, **data) -> web.Response:
    return web.json_response(JSendSchema().dump(fail(message, **data)), status=HTTPStatus.BAD_REQUEST)


def expects(schema: Optional[Schema], into="data"):
    """
    Loads the JSON body of the request through the given :class:`~marshmallow.Schema`,
    storing the result on the request under ``into``.

    A missing body, a body that isn't JSON, or one that doesn't load, is answered with
    a 400 listing the problems along with the JSON schema the route accepts.

    .. code:: python

        @expects(CarWriteSchema())
        async def post(self):
            registration = self.request["data"]["registration"]

    :param schema: The schema to load the body with.
    :param into: The request key to store the loaded body under.
    """

    if schema is None:
        return lambda x: x

    if not isinstance(schema, Schema):
        raise TypeError(f"Expected a marshmallow schema, got {type(schema).__name__}.")

    json_schema = JSONSchema().dump(schema)["definitions"][type(schema).__name__]

    def decorator(original_function):

        @wraps(original_function)
        async def new_func(self: View, **kwargs):
            request = self.request

            if not request.body_exists or request.content_type != "application/json":
                return _bad_request(
                    f"This route ({request.method}: {request.rel_url}) only accepts JSON.", schema=json_schema
                )

            try:
                body = await request.json()
            except JSONDecodeError as err:
                return _bad_request("Could not parse supplied JSON.", errors=list(err.args))

            try:
                request[into] = schema.load(body)
            except ValidationError as err:
                return _bad_request(
                    "The request did not validate properly.", errors=err.normalized_messages(), schema=json_schema
                )

            return await original_function(self, **kwargs)

        return new_func

    return decorator


def returns(schema: Optional[Schema] = None, return_code: HTTPStatus = HTTPStatus.OK, **named_schema: NamedSchema):
    """
    Dumps the value returned by the route through the given :class:`~marshmallow.Schema`,
    so that routes can return plain dictionaries (or models).

    .. code:: python

        @returns(JSendSchema.of(car=CarSchema()))
        async def get(self):
            return {"status": JSendStatus.SUCCESS, "data": {"car": car.serialize()}}

    A route with more than one outcome names each one, optionally pairing
    it with a status code, and returns the name along with the data:

    .. code:: python

        @returns(car_exists=(JSendSchema(), HTTPStatus.CONFLICT), created=JSendSchema.of(car=CarSchema()))
        async def post(self):
            return "car_exists", fail("A car with this registration already exists.")

    :param schema: The schema for a route with a single outcome.
    :param return_code: The status code used when a schema doesn't name its own.
    :param named_schema: The schema (and status code) of each named outcome.
    """

    if schema is None and not named_schema:
        return lambda x: x

    outcomes: Dict[Optional[str], Tuple[Schema, HTTPStatus]] = {
        name: value if isinstance(value, tuple) else (value, return_code)
        for name, value in named_schema.items()
    }
    outcomes[None] = (schema, return_code)

    def decorator(original_function):

        @wraps(original_function)
        async def new_func(self: View, **kwargs):
            result = await original_function(self, **kwargs)
            outcome, response_data = (None, result) if schema is not None else result

            try:
                outcome_schema, status = outcomes[outcome]
                return web.json_response(outcome_schema.dump(response_data), status=status)
            except (ValidationError, KeyError) as err:
                error_data = JSendSchema().dump({
                    "status": JSendStatus.ERROR,
                    "data": {"errors": err.messages if isinstance(err, ValidationError) else list(err.args)},
                    "message": "We tried to send you data back, but it came out wrong.",
                    "code": HTTPStatus.INTERNAL_SERVER_ERROR
                })
                return web.json_response(error_data, status=HTTPStatus.INTERNAL_SERVER_ERROR)

        return new_func

    return decorator
