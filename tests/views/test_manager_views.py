from aiohttp.test_utils import TestClient

from gocargo.models import Manager, Car
from gocargo.serializer import JSendSchema, JSendStatus, Many
from gocargo.serializer.misc import TokenSchema
from gocargo.serializer.models import ManagerSchema, CarSchema
from tests.conftest import BASE_URL, PASSWORD


class TestManagersView:

    async def test_register_manager(self, client: TestClient, database):
        response = await client.post("/api/v1/managers", json={
            "email": "m@x.com", "fname": "Mo", "lname": "Ng", "password": "pw123456",
            "balance": 25.5, "address": "1 High Street"
        })
        assert response.status == 201

        raw = await response.json()
        assert "password" not in raw["data"]["manager"]
        assert "password_hash" not in raw["data"]["manager"]

        response_data = JSendSchema.of(manager=ManagerSchema()).load(raw)
        manager = response_data["data"]["manager"]
        assert manager["balance"] == 25.5
        assert manager["cars"] == []
        assert manager["links"]["cars"]["href"] == f"{BASE_URL}/managers/m@x.com/cars"

    async def test_register_duplicate(self, client: TestClient, random_manager):
        response = await client.post("/api/v1/managers", json={
            "email": random_manager.email, "fname": "Mo", "lname": "Ng", "password": "pw123456"
        })
        assert response.status == 409
        assert await Manager.filter(email=random_manager.email).count() == 1

    async def test_register_long_password(self, client: TestClient, database):
        response = await client.post("/api/v1/managers", json={
            "email": "long@x.com", "fname": "Lo", "lname": "Ng", "password": "a" * 80
        })
        assert response.status == 400
        response_data = JSendSchema().load(await response.json())
        assert "password" in response_data["data"]["errors"]
        assert not await Manager.filter(email="long@x.com").exists()

    async def test_get_managers(self, client: TestClient, random_manager):
        response = await client.get("/api/v1/managers")
        response_data = JSendSchema.of(managers=Many(ManagerSchema())).load(await response.json())
        assert [m["email"] for m in response_data["data"]["managers"]] == [random_manager.email]

    async def test_delete_managers(self, client: TestClient, random_manager_car):
        response = await client.delete("/api/v1/managers")
        assert (await response.json())["data"]["deleted"] == 1
        assert await Car.all().count() == 1


class TestManagerAuthView:

    async def test_authenticate(self, client: TestClient, random_manager, credential_store):
        response = await client.post("/api/v1/managers/auth", json={
            "email": random_manager.email, "password": PASSWORD
        })
        assert response.status == 200

        response_data = JSendSchema.of(token=TokenSchema()).load(await response.json())
        token = response_data["data"]["token"]
        assert token["manager"] == random_manager.email
        assert credential_store.verify_token(token["token"]) == random_manager.email

    async def test_unknown_manager(self, client: TestClient, database):
        response = await client.post("/api/v1/managers/auth", json={"email": "nobody@x.com", "password": PASSWORD})
        assert response.status == 404

    async def test_wrong_password(self, client: TestClient, random_manager):
        response = await client.post("/api/v1/managers/auth", json={
            "email": random_manager.email, "password": "not the password"
        })
        assert response.status == 401
        response_data = JSendSchema().load(await response.json())
        assert response_data["status"] == JSendStatus.FAIL
        assert "token" not in response_data["data"]


class TestManagerView:

    async def test_get_manager(self, client: TestClient, random_manager):
        response = await client.get(f"/api/v1/managers/{random_manager.email}")
        response_data = JSendSchema.of(manager=ManagerSchema()).load(await response.json())
        assert response_data["data"]["manager"]["email"] == random_manager.email

    async def test_patch_manager(self, client: TestClient, random_manager, manager_auth):
        response = await client.patch(
            f"/api/v1/managers/{random_manager.email}", json={"address": "2 Low Road"}, headers=manager_auth
        )
        response_data = JSendSchema.of(manager=ManagerSchema()).load(await response.json())
        assert response_data["data"]["manager"]["address"] == "2 Low Road"
        assert response_data["data"]["manager"]["balance"] == 100.0

    async def test_put_manager(self, client: TestClient, random_manager, manager_auth):
        response = await client.put(f"/api/v1/managers/{random_manager.email}", json={
            "email": random_manager.email, "fname": "Mo", "lname": "Ng", "password": "a new password"
        }, headers=manager_auth)
        response_data = JSendSchema.of(manager=ManagerSchema()).load(await response.json())
        assert response_data["data"]["manager"]["balance"] == 0.0

        response = await client.post("/api/v1/managers/auth", json={
            "email": random_manager.email, "password": "a new password"
        })
        assert response.status == 200

    async def test_put_manager_email_clash(self, client: TestClient, random_manager, manager_auth,
                                           random_manager_factory):
        other = await random_manager_factory()
        response = await client.put(f"/api/v1/managers/{random_manager.email}", json={
            "email": other.email, "fname": "Mo", "lname": "Ng", "password": "a new password"
        }, headers=manager_auth)
        assert response.status == 409

    async def test_patch_long_password(self, client: TestClient, random_manager, manager_auth):
        response = await client.patch(
            f"/api/v1/managers/{random_manager.email}", json={"password": "é" * 40}, headers=manager_auth
        )
        assert response.status == 400
        assert (await Manager.get(id=random_manager.id)).password_hash == random_manager.password_hash

    async def test_patch_without_token(self, client: TestClient, random_manager):
        response = await client.patch(f"/api/v1/managers/{random_manager.email}", json={"address": "2 Low Road"})
        assert response.status == 401
        assert (await Manager.get(id=random_manager.id)).address == random_manager.address

    async def test_patch_other_manager(self, client: TestClient, manager_auth, random_manager_factory):
        other = await random_manager_factory()
        response = await client.patch(f"/api/v1/managers/{other.email}", json={"address": "x"}, headers=manager_auth)
        assert response.status == 401
        response_data = JSendSchema().load(await response.json())
        assert any("doesn't have access" in reason for reason in response_data["data"]["reasons"])

    async def test_invalid_token(self, client: TestClient, random_manager):
        response = await client.get(
            f"/api/v1/managers/{random_manager.email}", headers={"Authorization": "Bearer not-a-token"}
        )
        assert response.status == 401
        response_data = JSendSchema().load(await response.json())
        assert "invalid" in response_data["data"]["message"]

    async def test_delete_manager(self, client: TestClient, random_manager, random_manager_car, manager_auth):
        response = await client.delete(f"/api/v1/managers/{random_manager.email}", headers=manager_auth)
        assert response.status == 200
        assert await Manager.all().count() == 0
        assert await Car.filter(id=random_manager_car.id).count() == 1


class TestManagerCarViews:

    async def test_get_cars(self, client: TestClient, random_manager, random_manager_car, random_car):
        response = await client.get(f"/api/v1/managers/{random_manager.email}/cars")
        response_data = JSendSchema.of(cars=Many(CarSchema())).load(await response.json())
        assert [c["registration"] for c in response_data["data"]["cars"]] == [random_manager_car.registration]

    async def test_add_car(self, client: TestClient, random_manager, manager_auth):
        response = await client.post(
            f"/api/v1/managers/{random_manager.email}/cars",
            json={"registration": "REG1", "brand": "Fiat", "color": "red", "price": 40}, headers=manager_auth
        )
        assert response.status == 201

        response_data = JSendSchema.of(car=CarSchema()).load(await response.json())
        car = await Car.get(registration="REG1")
        assert response_data["data"]["car"]["id"] == car.id
        assert (await Manager.get(id=random_manager.id)).car_ids == [car.id]

    async def test_add_car_without_token(self, client: TestClient, random_manager):
        response = await client.post(f"/api/v1/managers/{random_manager.email}/cars", json={"registration": "REG1"})
        assert response.status == 401
        assert await Car.all().count() == 0

    async def test_add_car_unknown_manager(self, client: TestClient, manager_auth):
        response = await client.post(
            "/api/v1/managers/nobody@x.com/cars", json={"registration": "REG1"}, headers=manager_auth
        )
        assert response.status == 404

    async def test_add_duplicate_car(self, client: TestClient, random_manager, manager_auth, random_car):
        response = await client.post(
            f"/api/v1/managers/{random_manager.email}/cars",
            json={"registration": random_car.registration}, headers=manager_auth
        )
        assert response.status == 409

    async def test_get_car(self, client: TestClient, random_manager, random_manager_car):
        response = await client.get(f"/api/v1/managers/{random_manager.email}/cars/{random_manager_car.registration}")
        response_data = JSendSchema.of(car=CarSchema()).load(await response.json())
        assert response_data["data"]["car"]["registration"] == random_manager_car.registration

    async def test_get_car_not_in_fleet(self, client: TestClient, random_manager, random_car):
        response = await client.get(f"/api/v1/managers/{random_manager.email}/cars/{random_car.registration}")
        assert response.status == 404

    async def test_patch_car(self, client: TestClient, random_manager, random_manager_car, manager_auth):
        response = await client.patch(
            f"/api/v1/managers/{random_manager.email}/cars/{random_manager_car.registration}",
            json={"price": 120}, headers=manager_auth
        )
        response_data = JSendSchema.of(car=CarSchema()).load(await response.json())
        assert response_data["data"]["car"]["price"] == 120
        assert response_data["data"]["car"]["brand"] == "Volvo"

    async def test_delete_car(self, client: TestClient, random_manager, random_manager_car, manager_auth):
        response = await client.delete(
            f"/api/v1/managers/{random_manager.email}/cars/{random_manager_car.registration}", headers=manager_auth
        )
        assert response.status == 200

        response_data = JSendSchema.of(car=CarSchema()).load(await response.json())
        assert response_data["data"]["car"]["registration"] == random_manager_car.registration
        assert await Car.all().count() == 0
        assert (await Manager.get(id=random_manager.id)).car_ids == []

    async def test_delete_car_unknown_manager(self, client: TestClient, random_manager_car, manager_auth):
        response = await client.delete(
            f"/api/v1/managers/nobody@x.com/cars/{random_manager_car.registration}", headers=manager_auth
        )
        assert response.status == 404
        assert await Car.all().count() == 1
