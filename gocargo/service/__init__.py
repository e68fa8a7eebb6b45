"""
.. autoclasstree:: gocargo.service

The service layer for the system. Acts as the internal API.
Each interface (currently only the REST API) should use the
service layer to implement their logic.

The service layer implements the use cases for the system, such
that they may be reused by any program that needs to access it.
It is designed to represent the business logic.

- :mod:`~gocargo.service.access` reads and writes single collections
- :mod:`~gocargo.service.manager` coordinates changes that span collections
- :mod:`~gocargo.service.credentials` hashes passwords and issues session tokens
"""

from .errors import ServiceError, NotFoundError, ConflictError, InvalidCredentialsError
