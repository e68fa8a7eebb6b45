"""
Middleware
----------
"""
from http import HTTPStatus

from aiohttp import web
from aiohttp.abc import Request
from aiohttp.web_middlewares import middleware

from gocargo import logger
from gocargo.config import server_mode
from gocargo.serializer import JSendStatus, JSendSchema
from gocargo.serializer.jsend import fail
from gocargo.service.credentials import verify_token, TokenVerificationError

response_schema = JSendSchema()


@middleware
async def validate_token_middleware(request: Request, handler):
    """
    Ensures that any Authorization header given to the application is valid,
    and stores the email of the manager it belongs to on the request as the "token".
    """

    if "Authorization" in request.headers:
        try:
            request["token"] = verify_token(request)
        except TokenVerificationError as error:
            return web.json_response(response_schema.dump(fail(
                "Supplied authorization token is invalid.",
                errors=list(error.args)
            )), status=HTTPStatus.UNAUTHORIZED)

    return await handler(request)


@middleware
async def error_middleware(request: Request, handler):
    """
    Turns any unhandled exception into a JSend error, logging the traceback.
    The exception itself is only described to the client in development.
    """
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as error:
        logger.exception("Unhandled error on %s %s", request.method, request.rel_url)

        response = {
            "status": JSendStatus.ERROR,
            "message": "Something went wrong on our end.",
            "code": HTTPStatus.INTERNAL_SERVER_ERROR,
        }
        if server_mode == "development":
            response["data"] = {"errors": [f"{type(error).__name__}: {error}"]}

        return web.json_response(response_schema.dump(response), status=HTTPStatus.INTERNAL_SERVER_ERROR)
