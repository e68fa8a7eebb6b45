from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from gocargo.models import Manager
from gocargo.service import ConflictError, NotFoundError, InvalidCredentialsError
from gocargo.service.credentials import hash_password, verify_password, CredentialStore, TokenVerificationError, \
    EMAIL_CLAIM
from tests.conftest import PASSWORD, SECRET, fake


def test_hash_password():
    hashed = hash_password("hunter2hunter2")
    assert hashed != "hunter2hunter2"
    assert verify_password("hunter2hunter2", hashed)
    assert not verify_password("hunter3hunter3", hashed)


def test_hash_password_salted():
    """Assert that the same password hashes differently each time."""
    assert hash_password("hunter2hunter2") != hash_password("hunter2hunter2")


def test_hash_empty_password():
    with pytest.raises(ValueError):
        hash_password("")


def test_hash_long_password():
    """Assert that passwords bcrypt would truncate are refused rather than cut short."""
    with pytest.raises(ValueError, match="72 bytes"):
        hash_password("a" * 72 + "RIGHT")
    with pytest.raises(ValueError, match="72 bytes"):
        hash_password("é" * 37)


def test_verify_long_password():
    hashed = hash_password("a" * 72)
    assert verify_password("a" * 72, hashed)
    assert not verify_password("a" * 72 + "x", hashed)


def test_verify_malformed_hash():
    assert not verify_password("hunter2hunter2", "not a bcrypt hash")
    assert not verify_password("", hash_password("hunter2hunter2"))


def test_store_requires_secret():
    with pytest.raises(ValueError):
        CredentialStore("")


class TestTokens:

    def test_round_trip(self, credential_store):
        token = credential_store.issue_token("m@x.com")
        assert credential_store.verify_token(token) == "m@x.com"

    def test_expired(self, credential_store):
        token = credential_store.issue_token("m@x.com", now=datetime.now(timezone.utc) - timedelta(hours=3))
        with pytest.raises(TokenVerificationError, match="expired"):
            credential_store.verify_token(token)

    def test_wrong_secret(self, credential_store):
        token = CredentialStore("another-secret").issue_token("m@x.com")
        with pytest.raises(TokenVerificationError, match="invalid"):
            credential_store.verify_token(token)

    def test_tampered(self, credential_store):
        header, payload, signature = credential_store.issue_token("m@x.com").split(".")
        forged = jwt.encode({EMAIL_CLAIM: "other@x.com"}, "guess", algorithm="HS256").split(".")[1]
        with pytest.raises(TokenVerificationError):
            credential_store.verify_token(".".join((header, forged, signature)))

    def test_missing_claim(self, credential_store):
        token = jwt.encode({"sub": "m@x.com"}, SECRET, algorithm="HS256")
        with pytest.raises(TokenVerificationError, match="manager"):
            credential_store.verify_token(token)

    def test_not_a_string(self, credential_store):
        with pytest.raises(TokenVerificationError):
            credential_store.verify_token(None)


class TestRegister:

    async def test_register(self, credential_store, database):
        manager = await credential_store.register("m@x.com", "pw123456", first_name="Mo", last_name="Ng")
        assert manager.password_hash != "pw123456"
        assert verify_password("pw123456", manager.password_hash)
        assert await Manager.filter(email="m@x.com").count() == 1

    async def test_register_duplicate(self, credential_store, random_manager):
        before = await Manager.get(id=random_manager.id)
        with pytest.raises(ConflictError) as error:
            await credential_store.register(
                random_manager.email, "a different password", first_name="A", last_name="B", balance=5, address="X"
            )
        assert "email" in error.value.errors
        assert await Manager.filter(email=random_manager.email).count() == 1

        after = await Manager.get(id=random_manager.id)
        assert (after.first_name, after.last_name, after.balance, after.address, after.password_hash) == \
            (before.first_name, before.last_name, before.balance, before.address, before.password_hash)
        assert verify_password(PASSWORD, after.password_hash)

    async def test_register_long_password(self, credential_store, database):
        with pytest.raises(ValueError):
            await credential_store.register("long@x.com", "a" * 72 + "RIGHT", first_name="Lo", last_name="Ng")
        assert not await Manager.filter(email="long@x.com").exists()


class TestAuthenticate:

    async def test_authenticate(self, credential_store, random_manager):
        token = await credential_store.authenticate(random_manager.email, PASSWORD)
        assert credential_store.verify_token(token) == random_manager.email

    async def test_unknown_manager(self, credential_store, database):
        with pytest.raises(NotFoundError):
            await credential_store.authenticate(fake.email(), PASSWORD)

    async def test_wrong_password(self, credential_store, random_manager):
        with pytest.raises(InvalidCredentialsError):
            await credential_store.authenticate(random_manager.email, "not the password")

    @pytest.mark.parametrize("password", [
        PASSWORD[:-1],
        PASSWORD + "x",
        "C" + PASSWORD[1:],
        PASSWORD[:5] + "_" + PASSWORD[6:],
        " " + PASSWORD,
    ])
    async def test_password_one_character_off(self, credential_store, random_manager, password):
        with pytest.raises(InvalidCredentialsError):
            await credential_store.authenticate(random_manager.email, password)


class TestUpdate:

    async def test_replace(self, credential_store, random_manager):
        manager = await credential_store.replace_credentials(
            random_manager, email="new@x.com", password="a new password", first_name="New", last_name="Name"
        )
        assert manager.email == "new@x.com"
        assert manager.balance == 0
        assert manager.address == ""
        assert verify_password("a new password", manager.password_hash)

    async def test_partial(self, credential_store, random_manager):
        old_hash = random_manager.password_hash
        manager = await credential_store.update_credentials(random_manager, first_name="Changed")
        assert manager.first_name == "Changed"
        assert manager.balance == 100.0
        assert manager.password_hash == old_hash

    async def test_email_clash(self, credential_store, random_manager_factory):
        first, second = await random_manager_factory(), await random_manager_factory()
        with pytest.raises(ConflictError):
            await credential_store.update_credentials(second, email=first.email)
