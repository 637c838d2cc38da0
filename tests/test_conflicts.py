from trips.conflicts import canonicalize_trip, find_conflicts, trip_date_range


def _trip(trip_id, start, end, owner="alice", **extra):
    return {"id": trip_id, "title": trip_id.title(), "ownerId": owner, "startDate": start, "endDate": end, **extra}


def test_returns_every_overlapping_trip():
    trips = [
        _trip("spring", "2024-03-01", "2024-03-10"),
        _trip("ladakh", "2024-06-01", "2024-06-10"),
        _trip("goa", "2024-06-09", "2024-06-15"),
    ]
    conflicts = find_conflicts("2024-06-05", "2024-06-12", trips, owner_id="alice")
    assert sorted(t["id"] for t in conflicts) == ["goa", "ladakh"]


def test_no_conflicts_for_disjoint_range():
    trips = [_trip("ladakh", "2024-06-01", "2024-06-10")]
    assert find_conflicts("2024-06-11", "2024-06-12", trips) == []


def test_legacy_field_names_are_understood():
    trips = [
        {"id": "a", "owner_id": "alice", "start_date": "2024-06-01", "end_date": "2024-06-03"},
        {"id": "b", "owner_id": "alice", "startAt": "2024-06-02", "endAt": "2024-06-04"},
        {"id": "c", "ownerId": "alice", "start": "2024-06-03", "end": "2024-06-03"},
    ]
    conflicts = find_conflicts("2024-06-03", "2024-06-03", trips, owner_id="alice")
    assert [t["id"] for t in conflicts] == ["a", "b", "c"]


def test_unparseable_trips_are_skipped():
    trips = [
        _trip("broken", "someday", "2024-06-10"),
        {"id": "nodates", "ownerId": "alice"},
        _trip("ok", "2024-06-01", "2024-06-10"),
    ]
    assert [t["id"] for t in find_conflicts("2024-06-05", "2024-06-06", trips)] == ["ok"]


def test_other_owners_are_ignored():
    trips = [_trip("mine", "2024-06-01", "2024-06-10"), _trip("theirs", "2024-06-01", "2024-06-10", owner="bob")]
    assert [t["id"] for t in find_conflicts("2024-06-05", "2024-06-06", trips, owner_id="alice")] == ["mine"]


def test_duplicates_reported_once():
    trip = _trip("ladakh", "2024-06-01", "2024-06-10")
    assert len(find_conflicts("2024-06-05", "2024-06-06", [trip, dict(trip)])) == 1


def test_excluded_trip_is_not_its_own_conflict():
    trips = [_trip("ladakh", "2024-06-01", "2024-06-10")]
    assert find_conflicts("2024-06-05", "2024-06-06", trips, exclude_trip_id="ladakh") == []


def test_trip_date_range_prefers_canonical_names():
    assert trip_date_range({"startDate": "2024-01-02", "start_date": "2023-01-01", "end_date": "2024-01-03"}) == (
        "2024-01-02", "2024-01-03")


def test_canonicalize_trip_drops_aliases():
    trip = {"title": "Old", "owner_id": "alice", "start_date": "2024-01-01", "endAt": "2024-01-02"}
    assert canonicalize_trip(trip) == {
        "title": "Old", "ownerId": "alice", "startDate": "2024-01-01", "endDate": "2024-01-02",
    }
