"""Pure post-processing of computed rows and the JSON views document."""

from __future__ import annotations

import json
import numbers
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

from nt_leaderboard.classes.rows import row_to_dict
from nt_leaderboard.config import DEFAULT_ANOMALY_THRESHOLD
from nt_leaderboard.services.period_metrics import is_anomalous

RowT = TypeVar("RowT")

SORT_ASC = "asc"
SORT_DESC = "desc"

STATUS_OK = "ok"
STATUS_EMPTY = "empty"
STATUS_ERROR = "error"
NO_DATA_MESSAGE = "No data for this comparison."


def _cell(row: Any, key: str) -> Any:
    if isinstance(row, dict):
        return row.get(key)
    return getattr(row, key, None)


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


def sort_rows(rows: Iterable[RowT], key: str, direction: str = SORT_DESC) -> list[RowT]:
    """
    Return a new list sorted by ``key``. In either direction numbers come
    first, then text compared case-insensitively, then missing values.
    """
    if direction not in (SORT_ASC, SORT_DESC):
        raise ValueError(f"direction must be '{SORT_ASC}' or '{SORT_DESC}', got {direction!r}")
    numeric = []
    text = []
    missing = []
    for row in rows:
        value = _cell(row, key)
        if value is None:
            missing.append(row)
        elif _is_number(value):
            numeric.append(row)
        else:
            text.append(row)
    reverse = direction == SORT_DESC
    numeric.sort(key=lambda row: _cell(row, key), reverse=reverse)
    text.sort(key=lambda row: str(_cell(row, key)).casefold(), reverse=reverse)
    return numeric + text + missing


def toggle_direction(direction: str | None) -> str:
    return SORT_DESC if direction == SORT_ASC else SORT_ASC


def drop_glitched(
    rows: Iterable[RowT],
    threshold: int = DEFAULT_ANOMALY_THRESHOLD,
    *,
    key: str = "races_delta",
) -> tuple[list[RowT], int]:
    """Remove rows whose race delta is anomalous; returns (kept, removed count)."""
    kept: list[RowT] = []
    removed = 0
    for row in rows:
        value = _cell(row, key)
        if _is_number(value) and is_anomalous(value, threshold):
            removed += 1
            continue
        kept.append(row)
    return kept, removed


@dataclass
class ViewResult:
    status: str
    message: str = ""
    rows: Sequence[Any] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "message": self.message,
            "rows": [row_to_dict(row) for row in self.rows],
        }


def error_view(message: str) -> ViewResult:
    return ViewResult(status=STATUS_ERROR, message=message)


def empty_view(message: str = NO_DATA_MESSAGE) -> ViewResult:
    return ViewResult(status=STATUS_EMPTY, message=message)


def build_views_document(
    views: dict[str, ViewResult],
    *,
    generated_at: str,
    updated_at: str | None,
) -> dict[str, Any]:
    return {
        "generated_at": generated_at,
        "updated_at": updated_at,
        "views": {name: view.to_payload() for name, view in views.items()},
    }


def to_stable_json(payload: Any) -> str:
    return (
        json.dumps(
            payload,
            sort_keys=True,
            indent=2,
            separators=(",", ":"),
            ensure_ascii=True,
        )
        + "\n"
    )
