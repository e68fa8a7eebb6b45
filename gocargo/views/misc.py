"""
Miscellaneous Views
-------------------
"""
from aiohttp_apispec import docs
from marshmallow.fields import String

from gocargo.serializer import JSendSchema, JSendStatus, returns
from gocargo.serializer.links import api_links
from gocargo.serializer.models import Links
from gocargo.version import __version__, name as server_name
from gocargo.views.base import BaseView


class ApiRootView(BaseView):
    """
    Describes the api, and links to the top level collections.
    """
    url = "/"
    name = "api_root"

    @docs(summary="Get Api Info")
    @returns(JSendSchema.of(name=String(), version=String(), links=Links()))
    async def get(self):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {
                "name": server_name,
                "version": __version__,
                "links": api_links(self.base_url)
            }
        }
