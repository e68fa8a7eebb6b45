"""
Signals
-------

Defines the signals that the aiohttp server uses to set up and
tear down the database, and to bring the in-memory state in line
with what is stored.

Each signal must accept an the ``app`` argument.
"""

from aiohttp.abc import Application
from tortoise import Tortoise

from gocargo import logger
from gocargo.service.rebuildable import Rebuildable


async def initialize_database(app: Application):
    """Initializes and generates the schema for our database."""
    logger.info("Connecting to %s", app['database_uri'].split("://")[0])
    await Tortoise.init(
        db_url=app['database_uri'],
        modules={'models': ['gocargo.models']}
    )
    await Tortoise.generate_schemas(safe=True)


async def close_database_connections(app: Application):
    """Closes the open database connections."""
    await Tortoise.close_connections()


async def rebuild_state(app: Application):
    """Rebuilds anything derived from the database, such as the reference lists."""
    for rebuildable in (x for x in app.values() if isinstance(x, Rebuildable)):
        await rebuildable._rebuild()


def register_signals(app: Application, init_database=True):
    """Registers all the signals at the appropriate hooks."""
    if init_database:
        app.on_startup.append(initialize_database)

    app.on_startup.append(rebuild_state)  # the database must be ready before rebuilding

    if init_database:
        app.on_cleanup.append(close_database_connections)
