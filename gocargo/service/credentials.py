"""
Credentials
-----------

Password hashing and manager session tokens.

Passwords are hashed with bcrypt, and only ever compared through
:func:`bcrypt.checkpw`. A manager that logs in successfully is handed a
signed JWT carrying their email as the ``managerEmail`` claim, which must
be sent back as a bearer token on the routes that modify their account
or their fleet.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from aiohttp.web_request import Request
from jose import jwt, ExpiredSignatureError, JWTError
from tortoise.exceptions import IntegrityError

from gocargo import logger
from gocargo.config import password_max_bytes, password_rounds, token_lifetime
from gocargo.models import Manager
from gocargo.service.access.managers import get_manager
from gocargo.service.errors import ConflictError, NotFoundError, InvalidCredentialsError, unique_violations

ALGORITHM = "HS256"
EMAIL_CLAIM = "managerEmail"


class TokenVerificationError(Exception):
    pass


def hash_password(plain_password: str) -> str:
    if not isinstance(plain_password, str) or len(plain_password) == 0:
        raise ValueError("Password must be a non-empty string")
    if len(plain_password.encode("utf-8")) > password_max_bytes:
        raise ValueError(f"Password must be at most {password_max_bytes} bytes long")

    salt = bcrypt.gensalt(rounds=password_rounds)
    return bcrypt.hashpw(plain_password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    if len(plain_password.encode("utf-8")) > password_max_bytes:
        # bcrypt would compare only the first bytes
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # the stored hash is not a bcrypt hash
        return False


class CredentialStore:
    """
    Registers and authenticates managers, and issues and verifies their session tokens.

    :param secret: The key used to sign tokens. It is process-wide configuration,
        handed over when the app is built.
    :param lifetime: How long an issued token is valid for.
    """

    def __init__(self, secret: str, lifetime: timedelta = token_lifetime):
        if not secret:
            raise ValueError("A token signing secret is required.")
        self._secret = secret
        self.lifetime = lifetime

    def issue_token(self, email: str, *, now: Optional[datetime] = None) -> str:
        now = now if now is not None else datetime.now(timezone.utc)
        claims = {
            EMAIL_CLAIM: email,
            "iat": int(now.timestamp()),
            "exp": int((now + self.lifetime).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=ALGORITHM)

    def verify_token(self, token) -> str:
        """
        Given a token, verifies it, returning the email of the manager it was issued to.

        :raises TokenVerificationError: When the provided token is invalid.
        """
        if not isinstance(token, str):
            raise TokenVerificationError(f"Token must be of type string, not {type(token).__name__}.")

        try:
            claims = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except ExpiredSignatureError as e:
            raise TokenVerificationError("Token is expired.") from e
        except JWTError as e:
            raise TokenVerificationError("Token is invalid.") from e

        email = claims.get(EMAIL_CLAIM)
        if not email:
            raise TokenVerificationError("Token does not identify a manager.")

        return email

    async def register(self, email: str, password: str, *, first_name: str, last_name: str,
                       balance: float = 0, address: str = "") -> Manager:
        """
        Registers a new manager, storing only the hash of their password.

        :raises ConflictError: When a manager with the given email already exists.
        """
        if await get_manager(email=email) is not None:
            raise ConflictError({"email": "Manager already exists."})

        try:
            return await Manager.create(
                email=email, first_name=first_name, last_name=last_name,
                password_hash=hash_password(password), balance=balance, address=address
            )
        except IntegrityError as error:
            errors = unique_violations(error, "Manager already exists.")
            if not errors:
                raise error
            raise ConflictError(errors)

    async def authenticate(self, email: str, password: str) -> str:
        """
        Checks a manager's password and issues them a token.

        :raises NotFoundError: When there is no manager with that email.
        :raises InvalidCredentialsError: When the password does not match.
        """
        manager = await get_manager(email=email)
        if manager is None:
            raise NotFoundError("manager", email=email)

        if not verify_password(password, manager.password_hash):
            logger.info("Failed login attempt for manager %s", manager.id)
            raise InvalidCredentialsError("Invalid password.")

        return self.issue_token(manager.email)

    async def replace_credentials(self, manager: Manager, *, email: str, password: str, first_name: str,
                                  last_name: str, balance: float = 0, address: str = "") -> Manager:
        """Overwrites every field of the manager, re-hashing the new password."""
        await self._assert_email_free(manager, email)

        manager.email = email
        manager.first_name = first_name
        manager.last_name = last_name
        manager.password_hash = hash_password(password)
        manager.balance = balance
        manager.address = address
        return await self._save(manager)

    async def update_credentials(self, manager: Manager, **fields) -> Manager:
        """Overwrites only the supplied fields, re-hashing the password if one is given."""
        if "email" in fields:
            await self._assert_email_free(manager, fields["email"])

        password = fields.pop("password", None)
        if password:
            manager.password_hash = hash_password(password)

        for key in ("email", "first_name", "last_name", "balance", "address"):
            if key in fields:
                setattr(manager, key, fields[key])

        return await self._save(manager)

    @staticmethod
    async def _assert_email_free(manager: Manager, email: str):
        existing = await get_manager(email=email)
        if existing is not None and existing.id != manager.id:
            raise ConflictError({"email": "Manager email already in use."})

    @staticmethod
    async def _save(manager: Manager) -> Manager:
        try:
            await manager.save()
        except IntegrityError as error:
            errors = unique_violations(error, "Manager email already in use.")
            if not errors:
                raise error
            raise ConflictError(errors)
        return manager


def verify_token(request: Request) -> str:
    """
    Checks a request for the existence of a valid Authorization header.

    :param request: The request to check.
    :return: The email of the authenticated manager.
    :raises TokenVerificationError: When the Authorization header is invalid.
    """
    if "Authorization" not in request.headers:
        raise TokenVerificationError("You must supply your session token.")

    if not request.headers["Authorization"].startswith("Bearer "):
        raise TokenVerificationError("The Authorization header must be of the format \"Bearer $TOKEN\".")

    return request.app["credential_store"].verify_token(request.headers["Authorization"][7:])
