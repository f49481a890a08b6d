from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional

import requests

from nt_leaderboard.errors import FetchError, ParseError

logger = logging.getLogger(__name__)

MISSING_STATUSES = (204, 404)

DEFAULT_HEADERS = {
    "Accept": "application/json, application/x-ndjson, text/plain, */*",
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
    "User-Agent": "nt-leaderboard/1.0",
}


def is_url(ref: str) -> bool:
    return ref.startswith(("http://", "https://"))


def resolve_ref(root: str, name: str) -> str:
    """Join a snapshot file name onto a directory or base URL."""
    if is_url(name):
        return name
    if is_url(root):
        return root.rstrip("/") + "/" + name.lstrip("/")
    return str(Path(root) / name)


class SnapshotClient:
    """
    Reads snapshot text from local files or over HTTP. Owns a requests.Session
    unless one is provided.
    """

    def __init__(
        self,
        *,
        timeout_sec: int = 15,
        session: Optional[requests.Session] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.session = session or requests.Session()
        self.session.headers.update(headers or DEFAULT_HEADERS)
        self.timeout_sec = timeout_sec

    def clone_headers_to(self, target_session: requests.Session) -> None:
        """Copy headers to another Session so worker threads never share one."""
        target_session.headers.update(self.session.headers)

    def fetch_text(
        self,
        ref: str,
        *,
        allow_missing: bool = False,
        session: Optional[requests.Session] = None,
    ) -> str | None:
        """
        Return the raw text behind ``ref``. Returns None instead of raising
        when ``allow_missing`` is set and the source is absent or failing.
        """
        try:
            if is_url(ref):
                return self._fetch_url(ref, allow_missing=allow_missing, session=session)
            return self._read_file(ref, allow_missing=allow_missing)
        except FetchError as exc:
            if not allow_missing:
                raise
            logger.warning("optional snapshot unavailable, treating as empty: %s", exc)
            return None

    def _fetch_url(self, url: str, *, allow_missing: bool, session: Optional[requests.Session]) -> str | None:
        sess = session or self.session
        try:
            r = sess.get(url, timeout=self.timeout_sec)
        except requests.RequestException as exc:
            raise FetchError(f"{url}: {exc}", source=url) from exc

        logger.debug("fetch status=%s url=%s", r.status_code, url)
        if allow_missing and r.status_code in MISSING_STATUSES:
            logger.info("%s: HTTP %s, no snapshot", url, r.status_code)
            return None
        if not r.ok:
            raise FetchError(f"{url}: HTTP {r.status_code} {r.reason}", source=url)
        return r.text

    def _read_file(self, ref: str, *, allow_missing: bool) -> str | None:
        path = Path(ref)
        if allow_missing and not path.exists():
            logger.info("%s: no such file, no snapshot", path)
            return None
        try:
            return path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError(f"{path}: not valid UTF-8: {exc}", source=ref) from exc
        except OSError as exc:
            raise FetchError(f"{path}: {exc}", source=ref) from exc

    def close(self) -> None:
        self.session.close()
