"""
Decorators
-------------------------

:func:`match_getter` resolves the resources named in a route's url before
the handler runs, so that a handler is only ever called with resources that
exist. For example, ``/managers/{email}/cars/{registration}`` is answered
with a 404 if either the manager or their car is missing.
"""
from functools import wraps
from inspect import isawaitable
from typing import Union, Any, Dict, Tuple, Callable

from aiohttp import web
from aiohttp.web_request import Request
from aiohttp.web_urldispatcher import View
from apispec.ext.marshmallow import OpenAPIConverter, resolver

from gocargo.serializer import JSendSchema
from gocargo.serializer.jsend import fail

converter = OpenAPIConverter("3.0.2", resolver, None)

UrlParameter = Union[str, Tuple[str, Callable[[str], Any]]]


def flatten(error: Exception) -> list:
    """Collects the messages of an error and any errors nested inside it."""
    messages = []
    for arg in error.args:
        messages += flatten(arg) if isinstance(arg, Exception) else [arg]
    return messages


def resolve_match_map(request: Request, match_map: Dict[str, UrlParameter]) -> Dict[str, Any]:
    """
    Reads the url parameters named in the match map off the request.

    :param match_map: Maps each keyword argument of the getter to the url parameter it is read from,
        either as a name (kept as a string) or as a name and a function to convert it with.
    :raises ValueError: Listing every parameter that is missing or doesn't convert.
    """
    resolved = {}
    errors = []

    for key, value in match_map.items():
        url_parameter, convert = (value, str) if isinstance(value, str) else value
        raw = request.match_info.get(url_parameter)

        if raw is None:
            errors.append(ValueError(f'Missing url parameter "{url_parameter}".'))
            continue

        try:
            resolved[key] = convert(raw)
        except ValueError:
            errors.append(ValueError(f'Could not convert url parameter "{raw}" to expected type {convert.__name__}.'))

    if errors:
        raise ValueError(*errors)
    return resolved


def json_error(error_class, response) -> web.HTTPException:
    return error_class(text=JSendSchema().dumps(response), content_type='application/json')


def match_getter(getter_function: Callable, *injection_parameters: str, **match_map: UrlParameter):
    """
    Fetches resources from the url parameters and passes them to the handler,
    responding with a 404 if any of them don't exist.

    .. code-block:: python

        @match_getter(get_car, "car", registration="registration")
        async def get(self, car: Car):
            ...

        # a getter returning a tuple fills one parameter per item
        @match_getter(get_manager_and_car, "manager", "car", email="email", registration="registration")
        async def get(self, manager: Manager, car: Car):
            ...

    :param getter_function: Fetches the resource(s), returning None for any that are missing.
    :param injection_parameters: The handler parameter(s) to pass the resource(s) as.
    :param match_map: Maps keyword arguments of the getter to url parameters.
    """

    def attach_instance(original_function):

        @wraps(original_function)
        async def new_func(self: View, **kwargs):
            try:
                params = resolve_match_map(self.request, match_map)
            except ValueError as error:
                raise json_error(web.HTTPBadRequest, fail("Errors with your request.", errors=flatten(error)))

            found = getter_function(**params)
            if isawaitable(found):
                found = await found

            if len(injection_parameters) > 1:
                resources = dict(zip(injection_parameters, found))
            else:
                resources = {injection_parameters[0]: found}

            missing = [name for name, resource in resources.items() if resource is None]
            if missing:
                raise json_error(web.HTTPNotFound, fail(
                    f'Could not find {", ".join(missing)} with the given params.', params=params
                ))

            return await original_function(self, **kwargs, **resources)

        document_responses(new_func, original_function)
        return new_func

    return attach_instance


def document_responses(new_func, original_function):
    """Carries over the apispec documentation of the handler, adding the 400 and 404 responses."""
    new_func.__apispec__ = getattr(original_function, "__apispec__", {"schemas": [], "responses": {}, "parameters": []})
    new_func.__schemas__ = getattr(original_function, "__schemas__", [])

    json_schema = converter.schema2jsonschema(JSendSchema(only=("status", "data")))
    content = {"application/json": {"schema": json_schema}}

    new_func.__apispec__["responses"]["404"] = {"description": "resource_missing", "content": content}
    new_func.__apispec__["responses"].setdefault("400", {"description": "request_errors", "content": content})
