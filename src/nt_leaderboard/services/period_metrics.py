"""Per-racer period metrics computed from before/after snapshot pairs."""

from __future__ import annotations

import math
from typing import Optional

from nt_leaderboard.classes.racer import Number, Racer, pick_first_non_empty
from nt_leaderboard.classes.rows import DailyChangeRow, EventRow
from nt_leaderboard.config import DEFAULT_ANOMALY_THRESHOLD
from nt_leaderboard.services.display import pretty_name_from_slug

SPEED_WEIGHTED = "weighted"
SPEED_SNAPSHOT = "snapshot"

ACCURACY_MIN = 0.0
ACCURACY_MAX = 100.0
POINTS_BASE = 100


def clamp(low: float, value: float, high: float) -> float:
    return max(low, min(high, value))


def is_anomalous(races_delta: Number, threshold: int = DEFAULT_ANOMALY_THRESHOLD) -> bool:
    """A race delta at or above ``threshold`` cannot come from real play."""
    return races_delta >= threshold


def _both(before: Optional[Racer], now: Optional[Racer]) -> bool:
    return before is not None and now is not None


def race_delta(
    api_before: Optional[Racer],
    api_now: Optional[Racer],
    data_before: Optional[Racer],
    data_now: Optional[Racer],
) -> Number:
    """Prefer the data-feed delta when non-zero, else the API lifetime delta, else 0."""
    if _both(data_before, data_now):
        delta = data_now.races_played - data_before.races_played
        if delta != 0:
            return delta
    if _both(api_before, api_now):
        return api_now.races_played - api_before.races_played
    return 0


def typed_error_deltas(api_before: Optional[Racer], api_now: Optional[Racer]) -> tuple[Number, Number]:
    if not _both(api_before, api_now):
        return 0, 0
    typed_delta = max(0, api_now.typed - api_before.typed)
    errs_delta = max(0, api_now.errs - api_before.errs)
    return typed_delta, errs_delta


def accuracy_pct(typed_delta: Number, errs_delta: Number) -> float | None:
    """Period accuracy in percent, or None when nothing was typed."""
    if typed_delta <= 0:
        return None
    return clamp(ACCURACY_MIN, 100 * (1 - errs_delta / typed_delta), ACCURACY_MAX)


def weighted_speed(
    api_before: Optional[Racer],
    api_now: Optional[Racer],
    *,
    method: str = SPEED_WEIGHTED,
) -> float | None:
    """
    Recover the period-only average speed from two cumulative snapshots:
    (now.avg * now.played - before.avg * before.played) / played delta.
    Falls back to the current snapshot average, then to 0.
    """
    if api_now is None:
        return None

    before_played = api_before.played if api_before is not None else 0
    before_avg = api_before.avg_speed if api_before is not None else 0
    played_delta = api_now.played - before_played

    speed: float | None = None
    if method == SPEED_WEIGHTED and played_delta > 0:
        speed = (api_now.avg_speed * api_now.played - before_avg * before_played) / played_delta
    if speed is None or not math.isfinite(speed) or speed < 0:
        speed = api_now.avg_speed
    if not math.isfinite(speed) or speed < 0:
        speed = 0
    return speed


def points(speed: float | None, accuracy: float | None) -> float | None:
    if speed is None or accuracy is None:
        return None
    return POINTS_BASE + (speed / 2) * (accuracy / 100)


def _counter_delta(before: Optional[Racer], now: Optional[Racer], field_name: str) -> Number | None:
    if not _both(before, now):
        return None
    return max(0, getattr(now, field_name) - getattr(before, field_name))


def _field(racer: Optional[Racer], field_name: str) -> str | None:
    return getattr(racer, field_name) if racer is not None else None


def compute_event_row(
    api_before: Optional[Racer],
    api_now: Optional[Racer],
    data_before: Optional[Racer],
    data_now: Optional[Racer],
    *,
    speed_method: str = SPEED_WEIGHTED,
) -> EventRow | None:
    """
    Compute one event-period row from the lean API feed pair and the rich data
    feed pair for a single racer. Returns None when the racer had no activity.
    """
    delta = race_delta(api_before, api_now, data_before, data_now)
    if delta <= 0:
        return None

    typed_delta, errs_delta = typed_error_deltas(api_before, api_now)
    accuracy = accuracy_pct(typed_delta, errs_delta)
    speed = weighted_speed(api_before, api_now, method=speed_method)

    by_richness = (data_now, data_before, api_now, api_before)
    username = pick_first_non_empty(_field(r, "username") for r in by_richness)
    display_name = pick_first_non_empty(
        (_field(api_now, "display_name"), _field(api_before, "display_name")),
        fallback=username,
    )
    team_tag = pick_first_non_empty(_field(r, "team_tag") for r in by_richness)

    return EventRow(
        username=username,
        display_name=display_name,
        team_tag=team_tag,
        races_delta=delta,
        speed=speed,
        accuracy=accuracy,
        points=points(speed, accuracy),
        nitros_delta=_counter_delta(data_before, data_now, "nitros_used"),
        profile_views_delta=_counter_delta(data_before, data_now, "profile_views"),
    )


def compute_daily_change(
    before: Optional[Racer],
    now: Optional[Racer],
    *,
    anomaly_threshold: int = DEFAULT_ANOMALY_THRESHOLD,
) -> DailyChangeRow | None:
    """
    Plain now-minus-before deltas between two snapshots of the same feed. A
    racer absent from ``before`` counts from zero; one absent from ``now`` is
    dropped, as are inactive racers and anomalous race deltas.
    """
    if now is None:
        return None
    base = before or Racer()

    delta = now.races_played - base.races_played
    if delta <= 0 or is_anomalous(delta, anomaly_threshold):
        return None

    username = pick_first_non_empty((now.username, base.username))
    return DailyChangeRow(
        username=username,
        display_name=pick_first_non_empty(
            (now.display_name, base.display_name), fallback=pretty_name_from_slug(username)
        ),
        races_delta=delta,
        highest_speed_delta=now.highest_speed - base.highest_speed,
        profile_views_delta=now.profile_views - base.profile_views,
        nitros_delta=now.nitros_used - base.nitros_used,
    )
