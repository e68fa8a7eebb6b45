"""
Base
------------------------

Every view extends :class:`BaseView`, which knows its own url and is handed
the services shared by the app when its route is registered.
"""

from typing import Optional

from aiohttp.abc import Application
from aiohttp.web import View, AbstractRoute
from aiohttp_cors import CorsConfig, CorsViewMixin, ResourceOptions

from gocargo.service.credentials import CredentialStore
from gocargo.service.manager.booking_manager import BookingManager
from gocargo.service.manager.fleet_manager import FleetManager
from gocargo.service.manager.link_manager import LinkManager

SHARED_SERVICES = ("credential_store", "link_manager", "booking_manager", "fleet_manager", "base_url")
"""The app keys handed to every view as class attributes."""


class ViewConfigurationError(Exception):
    """Raised when a view is missing its url, or its route."""


class BaseView(View, CorsViewMixin):
    """
    A class-based view with CORS. Subclasses set ``url`` (relative to the api root)
    and optionally ``name``, and implement a coroutine per HTTP method.
    """

    url: str
    name: Optional[str]
    route: AbstractRoute
    credential_store: CredentialStore
    link_manager: LinkManager
    booking_manager: BookingManager
    fleet_manager: FleetManager
    base_url: str
    """The externally visible root of the api, used to build links."""

    cors_config = {
        "*": ResourceOptions(
            allow_credentials=True,
            expose_headers="*",
            allow_headers="*",
            allow_methods="*",
        )
    }

    @classmethod
    def register_route(cls, app: Application, base: Optional[str] = None):
        """
        Registers the view with the given router, and hands it the services it uses.

        :raises ViewConfigurationError: If the URL hasn't been set on the given view.
        """
        url = getattr(cls, "url", None)
        if url is None:
            raise ViewConfigurationError(f"{cls.__name__} has no url.")

        name = getattr(cls, "name", None)
        cls.route = app.router.add_view((base or "") + url, cls, **({"name": name} if name else {}))

        for service in SHARED_SERVICES:
            setattr(cls, service, app[service])

    @classmethod
    def enable_cors(cls, cors: CorsConfig):
        """Enables CORS on the view."""
        try:
            cors.add(cls.route, webview=True)
        except AttributeError as error:
            raise ViewConfigurationError(f"{cls.__name__} must be registered before enabling CORS.") from error
