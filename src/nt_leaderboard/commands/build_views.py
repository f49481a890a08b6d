import datetime
import logging
import pathlib
from typing import Any

from nt_leaderboard.config import Settings, configure_runtime, settings_from_mapping
from nt_leaderboard.snapshots.fetch import SnapshotClient, resolve_ref
from nt_leaderboard.snapshots.loader import LoadResult, SnapshotRequest, load_snapshots
from nt_leaderboard.services.row_assembler import (
    assemble_daily_changes,
    assemble_event_rows,
    build_leaderboard,
    build_races_per_day,
)
from nt_leaderboard.services.views import (
    STATUS_OK,
    ViewResult,
    build_views_document,
    empty_view,
    error_view,
    to_stable_json,
)

logger = logging.getLogger(__name__)

DATA_CURRENT = "data_current"
DATA_PREVIOUS = "data_previous"
API_BEFORE = "api_before"
API_NOW = "api_now"
EVENT_DATA_BEFORE = "event_data_before"
EVENT_DATA_NOW = "event_data_now"

EVENT_SOURCES = (API_BEFORE, API_NOW, EVENT_DATA_BEFORE, EVENT_DATA_NOW)

MAIN_ERROR_MESSAGE = "Error loading main snapshots."
EVENT_ERROR_MESSAGE = "Error loading event data."
EVENT_EMPTY_MESSAGE = "No event data available."


def utc_now_iso() -> str:
    now = datetime.datetime.now(datetime.timezone.utc)
    return now.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def build_sources(settings: Settings) -> list[SnapshotRequest]:
    """The main pair feeds the general views; the event view reads all four files."""
    root = settings.source_root
    return [
        SnapshotRequest(DATA_CURRENT, resolve_ref(root, settings.data_current)),
        SnapshotRequest(DATA_PREVIOUS, resolve_ref(root, settings.data_previous), allow_missing=True),
        SnapshotRequest(API_BEFORE, resolve_ref(root, settings.api_before), allow_missing=True),
        SnapshotRequest(API_NOW, resolve_ref(root, settings.api_now), allow_missing=True),
        SnapshotRequest(EVENT_DATA_BEFORE, resolve_ref(root, settings.event_data_before), allow_missing=True),
        SnapshotRequest(EVENT_DATA_NOW, resolve_ref(root, settings.event_data_now), allow_missing=True),
    ]


def _main_views(result: LoadResult, settings: Settings, now: datetime.datetime | None) -> dict[str, ViewResult]:
    if result.failed(DATA_CURRENT) or result.failed(DATA_PREVIOUS):
        return {
            "leaderboard": error_view(MAIN_ERROR_MESSAGE),
            "races_per_day": error_view(MAIN_ERROR_MESSAGE),
            "daily_changes": error_view(MAIN_ERROR_MESSAGE),
        }

    current = result.get(DATA_CURRENT)
    previous = result.get(DATA_PREVIOUS)
    leaderboard = build_leaderboard(current)
    views = {
        "leaderboard": ViewResult(STATUS_OK, f"{len(leaderboard):,} racers loaded.", leaderboard),
        "races_per_day": ViewResult(STATUS_OK, "", build_races_per_day(current, now=now)),
    }
    if not len(previous):
        views["daily_changes"] = empty_view()
    else:
        daily = assemble_daily_changes(previous, current, anomaly_threshold=settings.anomaly_threshold)
        views["daily_changes"] = ViewResult(STATUS_OK, daily.summary(), daily.rows)
    return views


def _event_view(result: LoadResult, settings: Settings) -> ViewResult:
    if any(result.failed(name) for name in EVENT_SOURCES):
        return error_view(EVENT_ERROR_MESSAGE)
    snapshots = [result.get(name) for name in EVENT_SOURCES]
    if not any(len(snapshot) for snapshot in snapshots):
        return empty_view(EVENT_EMPTY_MESSAGE)

    event = assemble_event_rows(*snapshots, speed_method=settings.speed_method)
    return ViewResult(STATUS_OK, event.summary(), event.rows)


def compute_views(
    result: LoadResult,
    settings: Settings,
    *,
    now: datetime.datetime | None = None,
) -> dict[str, ViewResult]:
    """Compute every view; a failed main snapshot never blocks the event view."""
    views = _main_views(result, settings, now)
    views["event"] = _event_view(result, settings)
    return views


def _settings_with_args(settings: Settings, args: Any) -> Settings:
    overrides = {
        "source_root": getattr(args, "source_root", None),
        "output_path": getattr(args, "out", None),
        "anomaly_threshold": getattr(args, "anomaly_threshold", None),
        "speed_method": getattr(args, "speed_method", None),
    }
    return settings_from_mapping({k: v for k, v in overrides.items() if v is not None}, base=settings)


def run_build_views(args: Any) -> int:
    settings = _settings_with_args(configure_runtime(), args)
    client = SnapshotClient(timeout_sec=settings.timeout_sec)
    try:
        result = load_snapshots(build_sources(settings), client=client, max_workers=settings.max_workers)
    finally:
        client.close()

    views = compute_views(result, settings)
    document = build_views_document(
        views,
        generated_at=utc_now_iso(),
        updated_at=result.get(DATA_CURRENT).updated_at,
    )

    out_path = pathlib.Path(settings.output_path)
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(to_stable_json(document), encoding="utf-8")
    except OSError:
        logger.exception("could not write views to %s", out_path)
        return 1

    for name, view in views.items():
        logger.info("view %s status=%s rows=%d", name, view.status, len(view.rows))
    logger.info("output path=%s", out_path)
    return 0
