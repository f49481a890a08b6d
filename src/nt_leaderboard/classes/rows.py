"""Computed rows emitted by the leaderboard views."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from .racer import Number


@dataclass(frozen=True)
class EventRow:
    username: str
    display_name: str
    team_tag: str
    races_delta: Number
    speed: float | None
    accuracy: float | None
    points: float | None
    nitros_delta: Number | None
    profile_views_delta: Number | None


@dataclass(frozen=True)
class DailyChangeRow:
    username: str
    display_name: str
    races_delta: Number
    highest_speed_delta: Number
    profile_views_delta: Number
    nitros_delta: Number


@dataclass(frozen=True)
class LeaderboardRow:
    username: str
    display_name: str
    team_tag: str
    title: str
    races_played: Number
    avg_speed: Number
    highest_speed: Number
    profile_views: Number
    join_date: str
    garage_cars: Number
    membership: str
    profile_url: str
    nitros_used: Number
    longest_session: Number
    league_tier: Number


@dataclass(frozen=True)
class RacesPerDayRow:
    username: str
    display_name: str
    total: Number
    days_active: int
    per_day: float
    join_date: str


def row_to_dict(row: Any) -> dict[str, Any]:
    return asdict(row)
