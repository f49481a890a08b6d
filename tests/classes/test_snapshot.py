from nt_leaderboard.classes.snapshot import Snapshot


def test_from_payload_accepts_bare_list():
    snapshot = Snapshot.from_payload("cur", [{"username": "a"}, {"username": "b"}])
    assert snapshot.updated_at is None
    assert [r.username for r in snapshot.racers] == ["a", "b"]


def test_from_payload_accepts_wrapped_object():
    snapshot = Snapshot.from_payload("cur", {"updatedAt": "2025-08-10T20:00:00Z", "racers": [{"username": "a"}]})
    assert snapshot.updated_at == "2025-08-10T20:00:00Z"
    assert len(snapshot) == 1


def test_from_payload_unknown_shapes_are_empty():
    assert len(Snapshot.from_payload("x", {"rows": []})) == 0
    assert len(Snapshot.from_payload("x", None)) == 0
    assert len(Snapshot.from_payload("x", 42)) == 0
    assert Snapshot.from_payload("x", {"updatedAt": None, "racers": []}).updated_at is None


def test_snapshot_is_immutable():
    snapshot = Snapshot.from_payload("cur", [{"username": "a"}])
    assert isinstance(snapshot.racers, tuple)


def test_from_payload_single_racer_object_is_one_record():
    snapshot = Snapshot.from_payload("api", {"username": "solo", "lifetimeRaces": 7})
    assert [r.username for r in snapshot.racers] == ["solo"]
    assert snapshot.racers[0].races_played == 7
