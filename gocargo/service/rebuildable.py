"""
An abstract class for services that need to bring their
state back in line with the database on startup. Any
instance that is added to the app is rebuilt on start.
"""

from abc import ABC, abstractmethod


class Rebuildable(ABC):

    @abstractmethod
    async def _rebuild(self):
        pass
