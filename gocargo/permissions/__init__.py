"""
.. autoclasstree:: gocargo.permissions

This module contains the various permission types. A permission is essentially
just an object (either function or class) that can be called asynchronously
and raises a RoutePermissionError in the case of a failed permission.
"""

from gocargo.permissions.decorators import requires
from gocargo.permissions.managers import ManagerMatchesToken, ValidToken
