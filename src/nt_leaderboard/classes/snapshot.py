"""Create a Snapshot object holding one named, immutable set of racers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .racer import Racer, normalize_records


@dataclass(frozen=True)
class Snapshot:
    """Racers from one source at one point in time."""

    name: str
    racers: tuple[Racer, ...] = field(default_factory=tuple)
    updated_at: str | None = None

    @classmethod
    def empty(cls, name: str) -> "Snapshot":
        return cls(name=name)

    @classmethod
    def from_payload(cls, name: str, payload: Any) -> "Snapshot":
        """
        Resolve a bare list or a ``{updatedAt, racers}`` object into a Snapshot.
        A lone racer object, as read from one-line NDJSON, is a single record.
        """
        if isinstance(payload, list):
            return cls(name=name, racers=tuple(normalize_records(payload)))
        if isinstance(payload, dict) and isinstance(payload.get("racers"), list):
            updated_at = payload.get("updatedAt") or None
            return cls(
                name=name,
                racers=tuple(normalize_records(payload["racers"])),
                updated_at=str(updated_at) if updated_at is not None else None,
            )
        if isinstance(payload, dict) and "racers" not in payload and "username" in payload:
            return cls(name=name, racers=tuple(normalize_records([payload])))
        return cls.empty(name)

    def __len__(self) -> int:
        return len(self.racers)

    def __repr__(self) -> str:
        return "Snapshot({}, racers={}, updated_at={})".format(self.name, len(self.racers), self.updated_at)
