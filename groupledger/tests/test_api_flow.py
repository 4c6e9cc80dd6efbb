"""
Integration tests for the HTTP API.

Walks a group through expenses, settle-up and deletion over the real
routes, SQL store and mocked Redis.
"""

import pytest

# Note: Client and DB setup are in conftest.py


async def create_user(client, user_id):
    response = await client.post("/v1/users", json={
        "id": user_id,
        "email": f"{user_id}@test.com",
        "display_name": user_id.upper(),
    })
    assert response.status_code == 201
    return response.json()


@pytest.fixture
async def group(client):
    """Group with members u1 (creator), u2, u3."""
    for user_id in ("u1", "u2", "u3"):
        await create_user(client, user_id)

    response = await client.post("/v1/groups", json={"name": "Flat", "type": "home", "created_by": "u1"})
    assert response.status_code == 201
    data = response.json()

    for user_id in ("u2", "u3"):
        response = await client.post("/v1/group-members", json={"group_id": data["id"], "user_id": user_id})
        assert response.status_code == 201

    return data


async def add_dinner(client, group_id, amount="30.00", paid_by="u1"):
    response = await client.post("/v1/expenses", json={
        "expense": {
            "group_id": group_id,
            "title": "Dinner",
            "amount": amount,
            "paid_by": paid_by,
            "split_type": "equal",
            "created_by": paid_by,
        }
    })
    assert response.status_code == 201, response.text
    return response.json()


async def balance(client, user_id, group_id):
    response = await client.get(f"/v1/users/{user_id}/groups/{group_id}/balance")
    assert response.status_code == 200
    return response.json()["balance"]


# TEST 1: Users
@pytest.mark.asyncio
async def test_user_sync_is_idempotent_by_email(client):
    await create_user(client, "u1")

    response = await client.post("/v1/users", json={
        "id": "u1", "email": "u1@test.com", "display_name": "Again"
    })

    assert response.status_code == 200
    assert response.json()["display_name"] == "U1"


@pytest.mark.asyncio
async def test_unknown_user_is_404(client):
    response = await client.get("/v1/users/nobody")

    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


@pytest.mark.asyncio
async def test_update_user_profile(client):
    await create_user(client, "u1")

    response = await client.patch("/v1/users/u1", json={"display_name": "Renamed"})

    assert response.status_code == 200
    assert response.json()["display_name"] == "Renamed"


# TEST 2: Groups
@pytest.mark.asyncio
async def test_group_gets_generated_code(client, group):
    assert len(group["code"]) == 6
    assert group["code"] == group["code"].upper()

    response = await client.get(f"/v1/groups/code/{group['code'].lower()}")
    assert response.status_code == 200
    assert response.json()["id"] == group["id"]


@pytest.mark.asyncio
async def test_members_listed_with_profiles(client, group):
    response = await client.get(f"/v1/groups/{group['id']}/members")

    assert response.status_code == 200
    members = response.json()
    assert [m["user_id"] for m in members] == ["u1", "u2", "u3"]
    assert members[1]["user"]["display_name"] == "U2"


@pytest.mark.asyncio
async def test_joining_twice_conflicts(client, group):
    response = await client.post("/v1/group-members", json={"group_id": group["id"], "user_id": "u2"})

    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_CONFLICT"


@pytest.mark.asyncio
async def test_group_requires_existing_creator(client):
    response = await client.post("/v1/groups", json={"name": "Ghost town", "created_by": "ghost"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_user_groups_listed(client, group):
    response = await client.get("/v1/users/u3/groups")

    assert [g["id"] for g in response.json()] == [group["id"]]


# TEST 3: Expenses and balances
@pytest.mark.asyncio
async def test_equal_split_and_settle_up(client, group):
    gid = group["id"]
    expense = await add_dinner(client, gid)

    assert expense["amount"] == "30.00"
    assert await balance(client, "u1", gid) == "20.00"
    assert await balance(client, "u2", gid) == "-10.00"
    assert await balance(client, "u3", gid) == "-10.00"

    response = await client.get(f"/v1/groups/{gid}/balances")
    assert response.status_code == 200
    assert sorted(response.json(), key=lambda t: t["from_user_id"]) == [
        {"from_user_id": "u2", "to_user_id": "u1", "amount": "10.00"},
        {"from_user_id": "u3", "to_user_id": "u1", "amount": "10.00"},
    ]


@pytest.mark.asyncio
async def test_custom_split_mismatch_rejected(client, group):
    response = await client.post("/v1/expenses", json={
        "expense": {
            "group_id": group["id"], "title": "Pizza", "amount": "10.00",
            "paid_by": "u1", "split_type": "custom", "created_by": "u1",
        },
        "shares": [
            {"user_id": "u1", "amount": "3.33"},
            {"user_id": "u2", "amount": "3.33"},
            {"user_id": "u3", "amount": "3.33"},
        ],
    })

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "ERR_SHARE_MISMATCH"
    assert body["details"] == {"expected": "10.00", "actual": "9.99"}

    listing = await client.get(f"/v1/groups/{group['id']}/expenses")
    assert listing.json() == []


@pytest.mark.asyncio
async def test_custom_split_accepted(client, group):
    response = await client.post("/v1/expenses", json={
        "expense": {
            "group_id": group["id"], "title": "Pizza", "amount": "10.00",
            "paid_by": "u1", "split_type": "custom", "created_by": "u1",
        },
        "shares": [
            {"user_id": "u1", "amount": "3.34"},
            {"user_id": "u2", "amount": "3.33"},
            {"user_id": "u3", "amount": "3.33"},
        ],
    })
    assert response.status_code == 201

    detail = await client.get(f"/v1/expenses/{response.json()['id']}")
    assert [s["amount"] for s in detail.json()["shares"]] == ["3.34", "3.33", "3.33"]


@pytest.mark.asyncio
async def test_equal_split_with_subset(client, group):
    response = await client.post("/v1/expenses", json={
        "expense": {
            "group_id": group["id"], "title": "Cab", "amount": "9.00",
            "paid_by": "u2", "split_type": "equal", "created_by": "u2",
        },
        "split_with": ["u2", "u3"],
    })
    assert response.status_code == 201

    assert await balance(client, "u1", group["id"]) == "0.00"
    assert await balance(client, "u2", group["id"]) == "4.50"
    assert await balance(client, "u3", group["id"]) == "-4.50"


@pytest.mark.asyncio
async def test_non_positive_amount_rejected(client, group):
    response = await client.post("/v1/expenses", json={
        "expense": {
            "group_id": group["id"], "title": "Refund", "amount": "-5.00",
            "paid_by": "u1", "created_by": "u1",
        }
    })

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_equal_split_in_unknown_group_is_404(client, group):
    response = await client.post("/v1/expenses", json={
        "expense": {
            "group_id": 9999, "title": "Dinner", "amount": "30.00",
            "paid_by": "u1", "split_type": "equal", "created_by": "u1",
        }
    })

    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


@pytest.mark.asyncio
async def test_group_expenses_include_shares(client, group):
    await add_dinner(client, group["id"])

    response = await client.get(f"/v1/groups/{group['id']}/expenses")

    expenses = response.json()
    assert len(expenses) == 1
    assert [s["amount"] for s in expenses[0]["shares"]] == ["10.00", "10.00", "10.00"]


@pytest.mark.asyncio
async def test_rename_expense(client, group):
    expense = await add_dinner(client, group["id"])

    response = await client.put(f"/v1/expenses/{expense['id']}", json={"title": "Team dinner"})

    assert response.status_code == 200
    assert response.json()["title"] == "Team dinner"
    assert response.json()["amount"] == "30.00"


# TEST 4: Settlements
@pytest.mark.asyncio
async def test_settlement_updates_balances_and_cache(client, group):
    gid = group["id"]
    await add_dinner(client, gid)
    first = await client.get(f"/v1/groups/{gid}/balances")
    assert len(first.json()) == 2

    response = await client.post("/v1/settlements", json={
        "group_id": gid, "from_user_id": "u2", "to_user_id": "u1", "amount": "10.00", "notes": "cash"
    })
    assert response.status_code == 201

    assert await balance(client, "u2", gid) == "0.00"
    assert await balance(client, "u1", gid) == "10.00"

    second = await client.get(f"/v1/groups/{gid}/balances")
    assert second.json() == [{"from_user_id": "u3", "to_user_id": "u1", "amount": "10.00"}]

    settlements = await client.get(f"/v1/groups/{gid}/settlements")
    assert [s["notes"] for s in settlements.json()] == ["cash"]
    mine = await client.get("/v1/users/u1/settlements")
    assert len(mine.json()) == 1


@pytest.mark.asyncio
async def test_settlement_with_outsider_rejected(client, group):
    await create_user(client, "u9")

    response = await client.post("/v1/settlements", json={
        "group_id": group["id"], "from_user_id": "u9", "to_user_id": "u1", "amount": "5.00"
    })

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_VALIDATION_LEDGER"


# TEST 5: Deletion
@pytest.mark.asyncio
async def test_delete_expense_resets_balances(client, group):
    gid = group["id"]
    expense = await add_dinner(client, gid)
    await client.get(f"/v1/groups/{gid}/balances")  # warm the cache

    response = await client.delete(f"/v1/expenses/{expense['id']}")
    assert response.status_code == 204

    for user_id in ("u1", "u2", "u3"):
        assert await balance(client, user_id, gid) == "0.00"
    assert (await client.get(f"/v1/groups/{gid}/balances")).json() == []
    assert (await client.get(f"/v1/expenses/{expense['id']}")).status_code == 404
    assert (await client.delete(f"/v1/expenses/{expense['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_total_balance(client, group):
    await add_dinner(client, group["id"])

    response = await client.get("/v1/users/u2/balance")

    assert response.json() == {"balance": "-10.00"}


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Correlation-ID" in response.headers
