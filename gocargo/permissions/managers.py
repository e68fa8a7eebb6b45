"""
Manager Permissions
-------------------
"""
from aiohttp.web_urldispatcher import View

from gocargo.models import Manager
from gocargo.permissions.permission import RoutePermissionError, Permission
from gocargo.service.credentials import verify_token, TokenVerificationError


class ValidToken(Permission):
    """Asserts that the request has a valid manager session token."""

    async def __call__(self, view: View, **kwargs):
        if "token" in view.request:
            return

        try:
            token = verify_token(view.request)
        except TokenVerificationError as error:
            raise RoutePermissionError(*error.args)
        else:
            view.request["token"] = token

    def __repr__(self):
        return "ValidToken()"

    @property
    def openapi_security(self):
        return [{"ManagerToken": []}]


class ManagerMatchesToken(Permission):
    """Asserts that the session token was issued to the given manager."""

    async def __call__(self, view: View, manager: Manager = None, **kwargs):
        if "token" not in view.request:
            raise RoutePermissionError("No session token was included in the Authorization header.")

        if manager is None or not manager.email == view.request["token"]:
            raise RoutePermissionError("The supplied token doesn't have access to this resource.")

    def __repr__(self):
        return "ManagerMatchesToken()"

    @property
    def openapi_security(self):
        return [{"ManagerToken": ["manager"]}]
