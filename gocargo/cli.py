"""
The entry point for the CLI tool
"""
import argparse

from aiohttp import web

from gocargo import logger
from gocargo.app import build_app
from gocargo.version import __version__, name


def run(argv=None):
    """Builds the app and serves it."""
    parser = argparse.ArgumentParser(prog=name, description="Runs the GoCarGo API server.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--database", default=None, help="A tortoise database url, overriding DATABASE_URL.")
    args = parser.parse_args(argv)

    logger.info(f'Starting {name} %s!', __version__)
    web.run_app(build_app(args.database), host=args.host, port=args.port)


if __name__ == '__main__':
    run()
