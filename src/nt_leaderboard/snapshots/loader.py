from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Iterable, Optional

import requests

from nt_leaderboard.classes.snapshot import Snapshot
from nt_leaderboard.errors import ParseError, SnapshotError
from nt_leaderboard.snapshots.fetch import SnapshotClient
from nt_leaderboard.snapshots.parsing import decode_snapshot_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotRequest:
    name: str
    ref: str
    allow_missing: bool = False


@dataclass
class LoadResult:
    snapshots: dict[str, Snapshot] = field(default_factory=dict)
    errors: dict[str, SnapshotError] = field(default_factory=dict)

    def get(self, name: str) -> Snapshot:
        """Loaded snapshot for ``name``, or an empty one when it failed."""
        if name in self.snapshots:
            return self.snapshots[name]
        return Snapshot.empty(name)

    def failed(self, name: str) -> bool:
        return name in self.errors


def load_snapshot(
    name: str,
    ref: str,
    *,
    allow_missing: bool = False,
    client: Optional[SnapshotClient] = None,
    session: Optional[requests.Session] = None,
) -> Snapshot:
    """Fetch and decode one snapshot source into a Snapshot."""
    active_client = client or SnapshotClient()
    try:
        text = active_client.fetch_text(ref, allow_missing=allow_missing, session=session)
        if text is None:
            return Snapshot.empty(name)
        payload = decode_snapshot_text(text, source=ref)
    except ParseError as exc:
        if not allow_missing:
            raise
        logger.warning("optional snapshot %s unreadable, treating as empty: %s", name, exc)
        return Snapshot.empty(name)

    snapshot = Snapshot.from_payload(name, payload)
    logger.debug("loaded snapshot %s racers=%d updated_at=%s", name, len(snapshot), snapshot.updated_at)
    return snapshot


def _load_worker(client: SnapshotClient, request: SnapshotRequest) -> Snapshot:
    # Worker threads get their own session
    thread_sess = requests.Session()
    client.clone_headers_to(thread_sess)
    try:
        return load_snapshot(
            request.name,
            request.ref,
            allow_missing=request.allow_missing,
            client=client,
            session=thread_sess,
        )
    finally:
        thread_sess.close()


def load_snapshots(
    sources: Iterable[SnapshotRequest],
    *,
    client: Optional[SnapshotClient] = None,
    max_workers: int = 4,
) -> LoadResult:
    """
    Load every source concurrently, one attempt each. Failures are collected
    per name so callers decide which sources their view requires.
    """
    requests_list = list(sources)
    result = LoadResult()
    if not requests_list:
        return result

    active_client = client or SnapshotClient()
    max_workers = min(max_workers, len(requests_list)) or 1
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(_load_worker, active_client, request): request for request in requests_list}
        for fut in as_completed(futures):
            request = futures[fut]
            try:
                result.snapshots[request.name] = fut.result()
            except SnapshotError as exc:
                logger.error("failed loading snapshot %s from %s: %s", request.name, request.ref, exc)
                result.errors[request.name] = exc
    return result
