"""
API endpoint tests.

Requests go through the real routers, services and an in-memory SQLite
store, so these cover the whole path from JSON body to stored document.
"""

from fastapi.testclient import TestClient

from test_fixtures import client, db_session, individual, meal_payload, shared


def post_meal(client: TestClient, group_id="group-1", **kwargs):
    return client.post(f"/groups/{group_id}/meals", json=meal_payload(**kwargs))


# =============================================================================
# HEALTH
# =============================================================================


def test_health_check(client: TestClient):
    r = client.get("/health-check")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "service": "LunchSplit"}


def test_database_health_check(client: TestClient):
    r = client.get("/health-check/database")
    assert r.status_code == 200
    assert r.json()["database"] == "ok"


# =============================================================================
# MEALS
# =============================================================================


def test_create_meal(client: TestClient):
    """
    Verifies:
    - 201 with the stored record and derived settlement
    - Settlement lines carry names and formatted amounts
    """
    r = post_meal(client)

    assert r.status_code == 201
    body = r.json()
    assert body["meal"]["total_amount"] == 38000
    assert body["meal"]["settlement"] == {"A": 18000, "B": 10000, "C": 10000}
    assert body["meal"]["created_by"] == "A"
    assert body["rounding_discrepancy"] == 0
    assert body["settlement_lines"][0] == {
        "participant_id": "A",
        "name": "김민수",
        "type": "member",
        "amount": 18000,
        "formatted": "18,000원",
    }


def test_create_meal_reports_rounding_discrepancy(client: TestClient):
    r = post_meal(client, items=[shared(price=10000)])

    assert r.status_code == 201
    assert r.json()["rounding_discrepancy"] == 1


def test_get_meal(client: TestClient):
    meal_id = post_meal(client).json()["meal"]["id"]

    r = client.get(f"/meals/{meal_id}")

    assert r.status_code == 200
    assert r.json()["meal"]["id"] == meal_id


def test_get_missing_meal(client: TestClient):
    r = client.get("/meals/does-not-exist")

    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"


def test_list_day_meals(client: TestClient):
    post_meal(client)
    post_meal(client, items=[individual(price=6000)])
    post_meal(client, date_key="2025-03-13")

    r = client.get("/groups/group-1/meals", params={"date_key": "2025-03-14"})

    assert r.status_code == 200
    assert len(r.json()) == 2


def test_update_meal(client: TestClient):
    meal_id = post_meal(client).json()["meal"]["id"]

    r = client.patch(
        f"/meals/{meal_id}",
        json={"items": [shared(price=9000, participant_ids=["A", "B", "C"])], "memo": "수정"},
    )

    assert r.status_code == 200
    meal = r.json()["meal"]
    assert meal["settlement"] == {"A": 3000, "B": 3000, "C": 3000}
    assert meal["memo"] == "수정"
    assert client.get(f"/meals/{meal_id}").json()["meal"]["total_amount"] == 9000


def test_update_meal_removing_sole_consumer_is_rejected(client: TestClient):
    meal_id = post_meal(client, items=[individual(member_id="C")]).json()["meal"]["id"]

    r = client.patch(
        f"/meals/{meal_id}",
        json={"participants": [{"id": "A", "name": "김민수"}, {"id": "B", "name": "이지은"}]},
    )

    assert r.status_code == 400
    assert r.json()["error"]["code"] == "unknownParticipant"
    assert client.get(f"/meals/{meal_id}").json()["meal"]["settlement"]["C"] == 8000


def test_delete_meal(client: TestClient):
    meal_id = post_meal(client).json()["meal"]["id"]

    r = client.delete(f"/meals/{meal_id}")

    assert r.status_code == 204
    assert client.get(f"/meals/{meal_id}").status_code == 404
    assert client.delete(f"/meals/{meal_id}").status_code == 404


# =============================================================================
# SETTLEMENT AND STATISTICS
# =============================================================================


def test_day_settlement(client: TestClient):
    post_meal(
        client,
        items=[shared(price=10000, participant_ids=["A", "B"])],
    )
    post_meal(
        client,
        items=[individual(price=3000, member_id="A"), individual(price=7000, member_id="C")],
    )

    r = client.get("/groups/group-1/settlement", params={"date_key": "2025-03-14"})

    assert r.status_code == 200
    body = r.json()
    assert body["grand_total"] == 20000
    assert body["meal_count"] == 2
    assert [(line["participant_id"], line["amount"]) for line in body["settlement"]] == [
        ("A", 8000),
        ("C", 7000),
        ("B", 5000),
    ]


def test_day_settlement_without_meals(client: TestClient):
    r = client.get("/groups/group-1/settlement", params={"date_key": "2025-03-14"})

    assert r.status_code == 200
    assert r.json()["grand_total"] == 0
    assert r.json()["settlement"] == []


def test_group_statistics(client: TestClient):
    post_meal(client, date_key="2025-03-10", items=[individual(price=8000)])
    post_meal(client, date_key="2025-03-14", items=[individual(price=10000, member_id="B")])
    post_meal(client, group_id="group-2", items=[individual(price=99000)])

    r = client.get("/groups/group-1/statistics")
    ranged = client.get("/groups/group-1/statistics", params={"start": "2025-03-11", "end": "2025-03-31"})

    assert r.status_code == 200
    body = r.json()
    assert body["total_amount"] == 18000
    assert body["meal_count"] == 2
    assert body["average_per_meal"] == 9000
    assert body["daily_totals"] == {"2025-03-10": 8000, "2025-03-14": 10000}
    assert ranged.json()["total_amount"] == 10000


# =============================================================================
# GUESTS
# =============================================================================


def test_create_guest(client: TestClient):
    r = client.post("/participants/guests", json={"name": "손님"})

    assert r.status_code == 201
    assert r.json()["type"] == "guest"
    assert r.json()["id"].startswith("guest_")


def test_meal_with_guest(client: TestClient):
    guest = client.post("/participants/guests", json={"name": "손님"}).json()
    participants = [{"id": "A", "name": "김민수"}, guest]

    r = post_meal(
        client,
        participants=participants,
        items=[shared(price=16000, participant_ids=["A", guest["id"]])],
    )

    assert r.status_code == 201
    assert r.json()["meal"]["settlement"] == {"A": 8000, guest["id"]: 8000}
