import os
from datetime import timedelta

server_mode = os.getenv("SERVER_MODE", "development")
"""The operational mode of the server."""

api_root = "/api/v1"
"""The base url for the api."""

base_url = os.getenv("BASE_URL", "http://localhost:8080")
"""The externally visible origin, used when building resource links."""

database_url = os.getenv("DATABASE_URL", "sqlite://db.sqlite3")
"""The tortoise database url."""

jwt_secret = os.getenv("JWT_SECRET", None)
"""The key used to sign manager session tokens."""

token_lifetime = timedelta(hours=2)
"""How long an issued session token stays valid."""

password_rounds = 10
"""The bcrypt cost factor."""

password_max_bytes = 72
"""The longest password bcrypt hashes without truncating, in UTF-8 bytes."""

sentry_dsn = os.getenv("SENTRY_DSN", None)
"""The sentry DSN, if exception tracking is wanted."""
