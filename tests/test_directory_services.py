import pytest

from helpdesk.services.customers import CustomerFilters, CustomerNotFoundError, CustomerService
from helpdesk.services.users import UserFilters, UserNotFoundError, UserService


def test_customer_filters_skip_catch_all_status():
    assert CustomerFilters(search="budi", status="all").to_query_params() == {"q": "budi"}
    assert CustomerFilters(status="active", service_type="fiber").to_query_params() == {
        "status": "active",
        "serviceType": "fiber",
    }


def test_user_filters_encode_booleans():
    assert UserFilters(role="noc", is_active=False).to_query_params() == {"role": "noc", "isActive": "false"}


@pytest.mark.asyncio
async def test_customer_crud_and_tickets(store_database, store_client):
    service = CustomerService(store_client)
    store_database.insert("tickets", {"id": "t-1", "customerId": "c-1"})
    store_database.insert("tickets", {"id": "t-2", "customerId": "c-2"})

    created = await service.create_customer({"id": "c-1", "name": "Budi", "email": "budi@example.com", "status": "active"})
    updated = await service.update_customer(created["id"], {"name": "Budi S", "email": "budi@example.com", "status": "inactive"})

    assert updated["id"] == created["id"]
    assert updated["status"] == "inactive"
    assert [doc["id"] for doc in await service.list_customers(CustomerFilters(status="inactive"))] == [created["id"]]

    await service.delete_customer(created["id"])
    with pytest.raises(CustomerNotFoundError):
        await service.get_customer(created["id"])
    assert [ticket["id"] for ticket in await service.tickets_for("c-2")] == ["t-2"]


@pytest.mark.asyncio
async def test_user_credentials_never_reach_the_store(store_database, store_client):
    service = UserService(store_client)

    created = await service.create_user(
        {"name": "Dewi", "email": "dewi@example.com", "role": "noc", "password": "secret", "confirmPassword": "secret"}
    )

    stored = store_database.get("users", created["id"])
    assert "password" not in stored
    assert "confirmPassword" not in stored
    assert stored["isActive"] is True


@pytest.mark.asyncio
async def test_user_update_preserves_last_login(store_database, store_client):
    service = UserService(store_client)
    store_database.insert(
        "users", {"id": "u-5", "name": "Dewi", "email": "dewi@example.com", "role": "noc", "lastLogin": "2024-03-01T00:00:00.000Z"}
    )

    updated = await service.update_user("u-5", {"name": "Dewi P", "email": "dewi@example.com", "role": "cs"})
    deactivated = await service.set_active("u-5", False)

    assert updated["lastLogin"] == "2024-03-01T00:00:00.000Z"
    assert updated["role"] == "cs"
    assert deactivated["isActive"] is False
    assert [user["id"] for user in await service.list_users(UserFilters(is_active=False))] == ["u-5"]


@pytest.mark.asyncio
async def test_missing_user_raises(store_client):
    with pytest.raises(UserNotFoundError):
        await UserService(store_client).set_active("u-404", True)
