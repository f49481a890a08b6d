import datetime
import json
import logging
import pathlib
from typing import Any

from nt_leaderboard.config import Settings, configure_runtime, settings_from_mapping
from nt_leaderboard.errors import ConfigError, ParseError, SnapshotError
from nt_leaderboard.snapshots.fetch import SnapshotClient
from nt_leaderboard.snapshots.parsing import decode_snapshot_text

logger = logging.getLogger(__name__)


def to_iso_millis(value: datetime.datetime) -> str:
    value = value.astimezone(datetime.timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def fetch_racers(url: str, *, client: SnapshotClient) -> list[Any]:
    """Fetch the remote top-racers list, which must be a JSON array."""
    text = client.fetch_text(url)
    racers = decode_snapshot_text(text or "", source=url)
    if not isinstance(racers, list):
        raise ParseError(f"{url}: expected JSON array of racers", source=url)
    return racers


def rotate_snapshot_files(
    directory: pathlib.Path,
    racers: list[Any],
    *,
    current_name: str,
    previous_name: str,
    now: datetime.datetime | None = None,
) -> pathlib.Path:
    """Move the current snapshot over the previous one and write a fresh current."""
    current_path = directory / current_name
    previous_path = directory / previous_name
    staged_path = directory / (current_name + ".tmp")

    payload = {
        "updatedAt": to_iso_millis(now or datetime.datetime.now(datetime.timezone.utc)),
        "racers": racers,
    }
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    directory.mkdir(parents=True, exist_ok=True)
    # current stays in place until the new payload is fully on disk
    staged_path.write_text(text, encoding="utf-8")

    if current_path.exists():
        current_path.replace(previous_path)
        logger.debug("rotated %s -> %s", current_path, previous_path)
    staged_path.replace(current_path)
    return current_path


def _settings_with_args(settings: Settings, args: Any) -> Settings:
    overrides = {
        "rotate_source_url": getattr(args, "source_url", None),
        "source_root": getattr(args, "dir", None),
    }
    return settings_from_mapping({k: v for k, v in overrides.items() if v is not None}, base=settings)


def run_rotate_snapshot(args: Any) -> int:
    settings = _settings_with_args(configure_runtime(), args)
    if not settings.rotate_source_url:
        raise ConfigError("rotate_source_url is required (config.yaml, NT_ROTATE_SOURCE_URL or --source-url)")

    client = SnapshotClient(timeout_sec=settings.timeout_sec)
    try:
        racers = fetch_racers(settings.rotate_source_url, client=client)
    except SnapshotError:
        logger.exception("auto-update failed for %s", settings.rotate_source_url)
        return 1
    finally:
        client.close()

    current_path = rotate_snapshot_files(
        pathlib.Path(settings.source_root),
        racers,
        current_name=settings.rotate_current,
        previous_name=settings.rotate_previous,
    )
    logger.info("%s updated with %d racers", current_path, len(racers))
    return 0
