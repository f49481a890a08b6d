"""Assemble ordered view rows from indexed snapshots."""

from __future__ import annotations

import datetime
import logging
import math
import re
from dataclasses import dataclass, field

from nt_leaderboard.classes.rows import DailyChangeRow, EventRow, LeaderboardRow, RacesPerDayRow
from nt_leaderboard.classes.snapshot import Snapshot
from nt_leaderboard.config import DEFAULT_ANOMALY_THRESHOLD
from nt_leaderboard.services.display import pretty_name_from_slug, racer_url
from nt_leaderboard.services.indexer import index_by_key, union_keys
from nt_leaderboard.services.period_metrics import SPEED_WEIGHTED, compute_daily_change, compute_event_row

logger = logging.getLogger(__name__)

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class EventResult:
    rows: list[EventRow] = field(default_factory=list)
    before_count: int = 0
    now_count: int = 0
    discarded: int = 0

    def summary(self) -> str:
        return (
            f"Loaded {self.before_count:,} (before API) and {self.now_count:,} (now API); "
            f"{len(self.rows):,} racers with Δ races > 0."
        )


@dataclass(frozen=True)
class DailyResult:
    rows: list[DailyChangeRow] = field(default_factory=list)
    discarded: int = 0

    def summary(self) -> str:
        return f"{len(self.rows):,} racers with activity in the last snapshot window."


def _by_races_delta(row: EventRow | DailyChangeRow) -> tuple:
    return (-row.races_delta, row.username.lower())


def assemble_event_rows(
    api_before: Snapshot,
    api_now: Snapshot,
    data_before: Snapshot,
    data_now: Snapshot,
    *,
    speed_method: str = SPEED_WEIGHTED,
) -> EventResult:
    """Compute event rows for every racer seen in any of the four snapshots."""
    api_b = index_by_key(api_before.racers)
    api_n = index_by_key(api_now.racers)
    data_b = index_by_key(data_before.racers)
    data_n = index_by_key(data_now.racers)

    rows: list[EventRow] = []
    discarded = 0
    for key in union_keys(api_b, api_n, data_b, data_n):
        row = compute_event_row(
            api_b.get(key),
            api_n.get(key),
            data_b.get(key),
            data_n.get(key),
            speed_method=speed_method,
        )
        if row is None:
            discarded += 1
            continue
        rows.append(row)

    rows.sort(key=_by_races_delta)
    logger.info("event rows=%d discarded=%d", len(rows), discarded)
    return EventResult(
        rows=rows,
        before_count=len(api_before),
        now_count=len(api_now),
        discarded=discarded,
    )


def assemble_daily_changes(
    previous: Snapshot,
    current: Snapshot,
    *,
    anomaly_threshold: int = DEFAULT_ANOMALY_THRESHOLD,
) -> DailyResult:
    """Compute snapshot-over-snapshot change rows for every racer in either snapshot."""
    prev_index = index_by_key(previous.racers)
    cur_index = index_by_key(current.racers)

    rows: list[DailyChangeRow] = []
    discarded = 0
    for key in union_keys(cur_index, prev_index):
        row = compute_daily_change(prev_index.get(key), cur_index.get(key), anomaly_threshold=anomaly_threshold)
        if row is None:
            discarded += 1
            continue
        rows.append(row)

    rows.sort(key=_by_races_delta)
    logger.info("daily change rows=%d discarded=%d", len(rows), discarded)
    return DailyResult(rows=rows, discarded=discarded)


def build_leaderboard(current: Snapshot) -> list[LeaderboardRow]:
    rows = [
        LeaderboardRow(
            username=racer.username,
            display_name=pretty_name_from_slug(racer.username),
            team_tag=racer.team_tag,
            title=racer.title,
            races_played=racer.races_played,
            avg_speed=racer.avg_speed,
            highest_speed=racer.highest_speed,
            profile_views=racer.profile_views,
            join_date=racer.join_date,
            garage_cars=racer.garage_cars,
            membership=racer.membership,
            profile_url=racer.profile_url or racer_url(racer.username),
            nitros_used=racer.nitros_used,
            longest_session=racer.longest_session,
            league_tier=racer.league_tier,
        )
        for racer in current.racers
    ]
    rows.sort(key=lambda row: -row.races_played)
    return rows


def parse_join_date(value: str, *, now: datetime.datetime) -> datetime.datetime:
    """Read a join date; bare ``YYYY-MM-DD`` is taken at local noon, garbage becomes ``now``."""
    text = str(value or "").strip()
    if _ISO_DATE_RE.match(text):
        try:
            return datetime.datetime.strptime(text, "%Y-%m-%d").replace(hour=12, tzinfo=now.tzinfo)
        except ValueError:
            return now
    try:
        parsed = datetime.datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return now
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=now.tzinfo)
    elif now.tzinfo is None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def build_races_per_day(current: Snapshot, *, now: datetime.datetime | None = None) -> list[RacesPerDayRow]:
    now = now or datetime.datetime.now().astimezone()
    rows: list[RacesPerDayRow] = []
    for racer in current.racers:
        joined = parse_join_date(racer.join_date, now=now)
        days = max(1, math.floor((now - joined).total_seconds() / SECONDS_PER_DAY))
        rows.append(
            RacesPerDayRow(
                username=racer.username,
                display_name=pretty_name_from_slug(racer.username),
                total=racer.races_played,
                days_active=days,
                per_day=racer.races_played / days,
                join_date=racer.join_date,
            )
        )
    rows.sort(key=lambda row: -row.per_day)
    return rows
