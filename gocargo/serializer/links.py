"""
Links
-----

Builds the hypermedia ``links`` map attached to resource representations,
so that a client can discover related resources without building urls
itself. Every builder is a pure function of the externally visible base url
and the business keys of the resource.

>>> booking_links("http://localhost:8080/api/v1", "x1Yz")["car"]
{'href': 'http://localhost:8080/api/v1/bookings/x1Yz/car'}
"""

from typing import Dict
from urllib.parse import quote

Links = Dict[str, Dict[str, str]]


def _link(base_url: str, *parts: str) -> Dict[str, str]:
    path = "/".join(quote(str(part), safe="@") for part in parts)
    return {"href": f"{base_url.rstrip('/')}/{path}"}


def booking_links(base_url: str, reference: str, user_email: str = None) -> Links:
    """
    :param base_url: The root of the api.
    :param reference: The booking reference.
    :param user_email: When given, the self link points at the user's copy of the booking.
    """
    if user_email is not None:
        self_link = _link(base_url, "users", user_email, "bookings", reference)
    else:
        self_link = _link(base_url, "bookings", reference)

    return {
        "self": self_link,
        "car": _link(base_url, "bookings", reference, "car"),
    }


def manager_links(base_url: str, email: str) -> Links:
    return {
        "self": _link(base_url, "managers", email),
        "cars": _link(base_url, "managers", email, "cars"),
    }


def car_links(base_url: str, registration: str) -> Links:
    return {
        "self": _link(base_url, "cars", registration),
        "image": _link(base_url, "cars", registration, "image"),
        "cars": _link(base_url, "cars"),
    }


def user_links(base_url: str, email: str) -> Links:
    return {
        "self": _link(base_url, "users", email),
        "bookings": _link(base_url, "users", email, "bookings"),
    }


def api_links(base_url: str) -> Links:
    """Links to each of the top level collections."""
    return {
        collection: _link(base_url, collection)
        for collection in ("users", "managers", "cars", "bookings")
    }
