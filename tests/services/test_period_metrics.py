import pytest

from nt_leaderboard.classes.racer import Racer
from nt_leaderboard.services import period_metrics as pm


def _api(username="racer", **kwargs) -> Racer:
    return Racer(username=username, **kwargs)


def _data(username="racer", **kwargs) -> Racer:
    return Racer(username=username, **kwargs)


def test_race_delta_prefers_data_feed():
    delta = pm.race_delta(
        _api(races_played=10), _api(races_played=20), _data(races_played=100), _data(races_played=150)
    )
    assert delta == 50


def test_race_delta_falls_back_to_api_when_data_delta_is_zero():
    delta = pm.race_delta(
        _api(races_played=10), _api(races_played=25), _data(races_played=100), _data(races_played=100)
    )
    assert delta == 15


def test_race_delta_needs_both_records_of_a_pair():
    assert pm.race_delta(None, _api(races_played=25), None, _data(races_played=150)) == 0
    assert pm.race_delta(_api(races_played=5), _api(races_played=25), _data(races_played=1), None) == 20


def test_accuracy():
    assert pm.accuracy_pct(1000, 50) == pytest.approx(95.0)
    assert pm.accuracy_pct(0, 0) is None
    assert pm.accuracy_pct(100, 500) == 0.0


def test_typed_error_deltas_clamp_at_zero_and_need_both_records():
    before = _api(typed=500, errs=40)
    now = _api(typed=400, errs=50)
    assert pm.typed_error_deltas(before, now) == (0, 10)
    assert pm.typed_error_deltas(None, now) == (0, 0)


def test_weighted_speed_recovers_period_average():
    before = _api(avg_speed=80, played=10)
    now = _api(avg_speed=100, played=30)
    assert pm.weighted_speed(before, now) == pytest.approx(110)


def test_weighted_speed_snapshot_method_uses_current_average():
    before = _api(avg_speed=80, played=10)
    now = _api(avg_speed=100, played=30)
    assert pm.weighted_speed(before, now, method=pm.SPEED_SNAPSHOT) == 100


def test_weighted_speed_falls_back_when_played_did_not_grow():
    assert pm.weighted_speed(_api(avg_speed=80, played=30), _api(avg_speed=90, played=30)) == 90


def test_weighted_speed_falls_back_when_result_is_negative():
    before = _api(avg_speed=200, played=10)
    now = _api(avg_speed=50, played=20)
    assert pm.weighted_speed(before, now) == 50


def test_weighted_speed_floors_at_zero_and_needs_current_record():
    assert pm.weighted_speed(_api(played=5), _api(avg_speed=-3, played=5)) == 0
    assert pm.weighted_speed(_api(avg_speed=80, played=10), None) is None


def test_weighted_speed_without_before_record_is_current_average():
    assert pm.weighted_speed(None, _api(avg_speed=70, played=12)) == pytest.approx(70)


def test_points():
    assert pm.points(110, 95) == pytest.approx(152.25)
    assert pm.points(None, 95) is None
    assert pm.points(110, None) is None


@pytest.mark.parametrize(
    ("delta", "threshold", "expected"),
    [(2599, 2600, False), (2600, 2600, True), (2601, 2600, True), (10, 5, True)],
)
def test_is_anomalous_excludes_the_threshold_itself(delta, threshold, expected):
    assert pm.is_anomalous(delta, threshold) is expected


def test_compute_event_row_merges_both_feeds():
    row = pm.compute_event_row(
        _api("Foo", display_name="Mr Foo", avg_speed=80, played=10, typed=10000, errs=500, races_played=90),
        _api("foo", display_name="", avg_speed=100, played=30, typed=11000, errs=550, races_played=140),
        _data("FOO", races_played=100, nitros_used=10, profile_views=7, team_tag="ZOOM"),
        _data("Foo", races_played=150, nitros_used=4, profile_views=9, team_tag=""),
    )

    assert row is not None
    assert row.username == "Foo"
    assert row.display_name == "Mr Foo"
    assert row.team_tag == "ZOOM"
    assert row.races_delta == 50
    assert row.speed == pytest.approx(110)
    assert row.accuracy == pytest.approx(95.0)
    assert row.points == pytest.approx(152.25)
    assert row.nitros_delta == 0
    assert row.profile_views_delta == 2


def test_compute_event_row_without_typing_has_no_accuracy_or_points():
    row = pm.compute_event_row(
        _api(races_played=10, avg_speed=60, played=4),
        _api(races_played=12, avg_speed=60, played=6),
        None,
        None,
    )
    assert row is not None
    assert row.races_delta == 2
    assert row.accuracy is None
    assert row.points is None
    assert row.speed == pytest.approx(60)
    assert row.nitros_delta is None
    assert row.profile_views_delta is None


def test_compute_event_row_data_only_has_no_speed():
    row = pm.compute_event_row(None, None, _data(races_played=1), _data(races_played=4))
    assert row is not None
    assert row.speed is None
    assert row.points is None
    assert row.display_name == "racer"


@pytest.mark.parametrize("after", [100, 90])
def test_compute_event_row_discards_inactive(after):
    assert pm.compute_event_row(None, None, _data(races_played=100), _data(races_played=after)) is None


def test_compute_event_row_discards_when_no_pairs():
    assert pm.compute_event_row(None, _api(races_played=10), None, _data(races_played=10)) is None


def test_compute_daily_change_plain_deltas():
    row = pm.compute_daily_change(
        _data("fast_typer", races_played=100, highest_speed=140, profile_views=50, nitros_used=20),
        _data("fast_typer", races_played=150, highest_speed=138, profile_views=61, nitros_used=25),
    )
    assert row is not None
    assert row.display_name == "Fast Typer"
    assert (row.races_delta, row.highest_speed_delta, row.profile_views_delta, row.nitros_delta) == (50, -2, 11, 5)


def test_compute_daily_change_missing_before_counts_from_zero():
    row = pm.compute_daily_change(None, _data("new", races_played=12))
    assert row is not None
    assert row.races_delta == 12


def test_compute_daily_change_drops_missing_now_and_inactive():
    assert pm.compute_daily_change(_data(races_played=5), None) is None
    assert pm.compute_daily_change(_data(races_played=5), _data(races_played=5)) is None
    assert pm.compute_daily_change(_data(races_played=5), _data(races_played=3)) is None


@pytest.mark.parametrize(("after", "kept"), [(2599, True), (2600, False), (2601, False)])
def test_compute_daily_change_anomaly_cutoff(after, kept):
    row = pm.compute_daily_change(_data(races_played=0), _data(races_played=after), anomaly_threshold=2600)
    assert (row is not None) is kept


def test_compute_daily_change_custom_threshold():
    assert pm.compute_daily_change(_data(races_played=0), _data(races_played=50), anomaly_threshold=50) is None
