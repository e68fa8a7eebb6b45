"""
App
-----
"""

import asyncio
import secrets

import sentry_sdk
import uvloop
from aiohttp import web
from aiohttp_apispec import setup_aiohttp_apispec
from sentry_sdk.integrations.aiohttp import AioHttpIntegration

from gocargo import logger
from gocargo.config import api_root, base_url, database_url, jwt_secret, sentry_dsn, server_mode
from gocargo.middleware import error_middleware, validate_token_middleware
from gocargo.service.credentials import CredentialStore
from gocargo.service.manager.booking_manager import BookingManager
from gocargo.service.manager.fleet_manager import FleetManager
from gocargo.service.manager.link_manager import LinkManager
from gocargo.signals import register_signals
from gocargo.version import __version__, name
from gocargo.views import register_views


def build_app(db_uri=None, secret=None, init_database=True):
    """
    Sets up the app and installs uvloop.

    :param db_uri: The database to connect to, defaulting to the configured one.
    :param secret: The token signing secret, defaulting to the configured one.
    :param init_database: Whether the app should connect to the database itself.
    """
    app = web.Application(middlewares=[error_middleware, validate_token_middleware])
    uvloop.install()

    secret = secret if secret is not None else jwt_secret
    if not secret:
        if server_mode != "development":
            raise RuntimeError("JWT_SECRET must be set outside of development.")
        logger.warning("No JWT_SECRET set, using a throwaway secret. Tokens will not survive a restart.")
        secret = secrets.token_hex(32)

    app['credential_store'] = CredentialStore(secret)
    app['link_manager'] = LinkManager()
    app['booking_manager'] = BookingManager(app['link_manager'])
    app['fleet_manager'] = FleetManager(app['link_manager'], app['booking_manager'])
    app['base_url'] = base_url.rstrip("/") + api_root
    app['database_uri'] = db_uri if db_uri is not None else database_url

    register_signals(app, init_database=init_database)
    register_views(app, api_root)

    setup_aiohttp_apispec(
        app=app, title=name, version=__version__, url=f"{api_root}/docs",
        servers=[{"url": base_url}],
        components={
            "securitySchemes": {
                "ManagerToken": {
                    "type": "http",
                    "description": "A session token issued by /managers/auth",
                    "scheme": "bearer",
                    "bearerFormat": "JWT",
                }
            }
        },
    )

    # set up sentry exception tracking
    if server_mode != "development" and sentry_dsn is not None:
        logger.info("Starting Sentry Logging")
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=server_mode,
            release=f"{name}@{__version__}",
            integrations=[AioHttpIntegration()],
        )

    if server_mode == "development":
        asyncio.get_event_loop().set_debug(True)

    return app
