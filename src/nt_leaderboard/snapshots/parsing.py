import json
import logging
import warnings
from typing import Any

from nt_leaderboard.errors import MissingDataWarning, ParseError

logger = logging.getLogger(__name__)

DOCUMENT_START_CHARS = ("{", "[")


def parse_ndjson(text: str, *, source: str = "<text>") -> list[Any]:
    """Parse one JSON value per non-blank line, skipping unreadable lines."""
    lines = [line.strip() for line in text.splitlines()]
    records: list[Any] = []
    skipped = 0
    for lineno, line in enumerate(lines, start=1):
        if not line:
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError:
            skipped += 1
            warnings.warn(
                f"{source}:{lineno}: skipping bad NDJSON line: {line[:80]}",
                MissingDataWarning,
                stacklevel=2,
            )

    if not records:
        raise ParseError(f"{source}: no readable NDJSON lines", source=source)
    if skipped:
        logger.info("%s: parsed %d NDJSON records, skipped %d", source, len(records), skipped)
    return records


def decode_snapshot_text(text: str, *, source: str = "<text>") -> Any:
    """
    Decode snapshot text as one JSON document when it starts with ``{`` or
    ``[``, otherwise as newline-delimited JSON. A multi-line text that is not
    one valid document is retried line by line.
    """
    trimmed = (text or "").strip()
    if not trimmed:
        raise ParseError(f"{source}: empty content", source=source)

    if trimmed[0] in DOCUMENT_START_CHARS:
        try:
            return json.loads(trimmed)
        except json.JSONDecodeError as exc:
            if "\n" not in trimmed:
                raise ParseError(f"{source}: invalid JSON: {exc}", source=source) from exc
            # NDJSON whose lines are objects also starts with "{"
            logger.debug("%s: not a single JSON document (%s), reading as NDJSON", source, exc)

    return parse_ndjson(trimmed, source=source)
