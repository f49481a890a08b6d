"""Create a Racer object to represent one racer's snapshot state."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

Number = int | float

# canonical field -> raw keys, first present wins
NUMERIC_FIELDS: dict[str, tuple[str, ...]] = {
    "races_played": ("racesPlayed", "lifetimeRaces"),
    "avg_speed": ("avgSpeed", "avgWpm"),
    "highest_speed": ("highestSpeed", "highWpm"),
    "profile_views": ("profileViews",),
    "garage_cars": ("garageCars",),
    "nitros_used": ("nitrosUsed",),
    "longest_session": ("longestSession",),
    "league_tier": ("leagueTier",),
    "typed": ("typed",),
    "errs": ("errs",),
    "played": ("played",),
}

STRING_FIELDS: dict[str, tuple[str, ...]] = {
    "username": ("username",),
    "display_name": ("displayName",),
    "team_tag": ("tag", "teamTag"),
    "title": ("title",),
    "join_date": ("joinDate",),
    "profile_url": ("profileURL",),
}

DEFAULT_MEMBERSHIP = "basic"


def safe_number(value: Any, default: Number = 0) -> Number:
    """Parse ``value`` as a number, returning ``default`` when it is not finite."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else default
    text = str(value).strip()
    if not text:
        return default
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return default
    return number if math.isfinite(number) else default


def is_non_empty(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def pick_first_non_empty(
    candidates: Iterable[Any],
    fallback: Any = "",
    is_present: Callable[[Any], bool] = is_non_empty,
) -> Any:
    """Return the first candidate accepted by ``is_present``, else ``fallback``."""
    for value in candidates:
        if is_present(value):
            return value
    return fallback


def _raw_value(raw: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    return pick_first_non_empty((raw.get(key) for key in keys), fallback=None)


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class Racer:
    """Normalized racer record shared by the lean API feed and the rich data feed."""

    username: str = ""
    display_name: str = ""
    team_tag: str = ""
    title: str = ""
    races_played: Number = 0
    avg_speed: Number = 0
    highest_speed: Number = 0
    profile_views: Number = 0
    garage_cars: Number = 0
    nitros_used: Number = 0
    longest_session: Number = 0
    league_tier: Number = 0
    membership: str = DEFAULT_MEMBERSHIP
    join_date: str = ""
    profile_url: str = ""
    typed: Number = 0
    errs: Number = 0
    played: Number = 0

    @classmethod
    def from_record(cls, raw: Mapping[str, Any] | None) -> "Racer":
        raw = raw or {}
        values: dict[str, Any] = {}
        for field_name, keys in NUMERIC_FIELDS.items():
            values[field_name] = safe_number(_raw_value(raw, keys))
        for field_name, keys in STRING_FIELDS.items():
            values[field_name] = _as_text(_raw_value(raw, keys))
        membership = _as_text(raw.get("membership")).strip()
        values["membership"] = membership or DEFAULT_MEMBERSHIP
        return cls(**values)

    @property
    def key(self) -> str:
        return self.username.strip().lower()

    def __str__(self) -> str:
        return "[Racer]: {} races: {} avg: {} top: {}".format(
            self.username, self.races_played, self.avg_speed, self.highest_speed
        )


def normalize_records(records: Iterable[Any]) -> list[Racer]:
    """Normalize raw records, skipping entries that are not JSON objects."""
    racers: list[Racer] = []
    for idx, raw in enumerate(records):
        if not isinstance(raw, Mapping):
            logger.warning("skipping non-object racer record at index %d: %r", idx, raw)
            continue
        racers.append(Racer.from_record(raw))
    return racers
