"""
The models package contains all the models used on the server.

.. autoclasstree:: gocargo.models
"""

from .booking import Booking, BookingStatus
from .car import Car
from .manager import Manager
from .user import User
