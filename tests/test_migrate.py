from firebase_admin import firestore

from migrate_trip_dates import field_updates, migrate_trip_fields


def test_field_updates_for_legacy_document():
    update = field_updates({"title": "Old", "owner_id": "bob", "start_date": "2023-01-01", "end": "2023-01-05"})
    assert update == {
        "owner_id": firestore.DELETE_FIELD,
        "start_date": firestore.DELETE_FIELD,
        "end": firestore.DELETE_FIELD,
        "ownerId": "bob",
        "startDate": "2023-01-01",
        "endDate": "2023-01-05",
    }


def test_field_updates_for_canonical_document():
    assert field_updates({"ownerId": "bob", "startDate": "2023-01-01", "endDate": "2023-01-05"}) == {}


def test_migrate_rewrites_only_legacy_trips(db):
    db.put("trips/legacy", {"title": "Old", "owner_id": "bob", "startAt": "2023-01-01", "end_at": "2023-01-05"})
    db.put("trips/current", {"title": "New", "ownerId": "bob", "startDate": "2024-01-01", "endDate": "2024-01-02"})

    assert migrate_trip_fields(db) == ["legacy"]
    assert db.data("trips/legacy") == {"title": "Old", "ownerId": "bob", "startDate": "2023-01-01", "endDate": "2023-01-05"}
    assert db.commits == 1


def test_dry_run_changes_nothing(db):
    db.put("trips/legacy", {"owner_id": "bob", "start": "2023-01-01", "end": "2023-01-05"})
    assert migrate_trip_fields(db, dry_run=True) == ["legacy"]
    assert db.data("trips/legacy")["owner_id"] == "bob"
    assert db.commits == 0
