import pytest

from search.routes import case_variants, prefix_range


@pytest.fixture
def seeded(db):
    db.put("users/u1", {"handle": "alice", "displayName": "Alice A."})
    db.put("users/u2", {"handle": "bob", "displayName": "Alicia Keys"})
    db.put("users/u3", {"handle": "carol", "displayName": "carol"})
    db.put("trips/t1", {"title": "Paris getaway", "destination": "France", "visibility": "public"})
    db.put("trips/t2", {"title": "Paris in secret", "destination": "France", "visibility": "private"})
    db.put("trips/t3", {"title": "Weekend", "destination": "Paris", "visibility": "public"})
    return db


def test_case_variants():
    assert case_variants("par") == ["par", "Par"]
    assert case_variants("123") == ["123"]


def test_prefix_range():
    start, end = prefix_range("par")
    assert start == "par" and end.startswith("par") and end > "paris"


def test_short_query_returns_empty(client, seeded):
    res = client.get("/api/search?q=pa")
    assert res.status_code == 200
    assert res.get_json() == {"users": [], "trips": [], "tags": []}


def test_users_by_handle_then_display_name(client, seeded):
    body = client.get("/api/search?q=ali").get_json()
    assert [u["id"] for u in body["users"]] == ["u1", "u2"]


def test_public_trips_by_title_and_destination(client, seeded):
    body = client.get("/api/search?q=par").get_json()
    assert [t["id"] for t in body["trips"]] == ["t1", "t3"]


def test_results_are_capped(client, db):
    for i in range(10):
        db.put(f"users/u{i}", {"handle": f"traveller{i}"})
    body = client.get("/api/search?q=travel").get_json()
    assert len(body["users"]) == 6
