"""Lookup tables from lowercase username to racer."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from nt_leaderboard.classes.racer import Racer


def racer_key(racer: Racer) -> str:
    return racer.key


def index_by_key(racers: Iterable[Racer], key_fn: Callable[[Racer], str] = racer_key) -> dict[str, Racer]:
    """Index racers by key. Empty keys are skipped and later duplicates win."""
    out: dict[str, Racer] = {}
    for racer in racers or ():
        key = key_fn(racer)
        if not key:
            continue
        out[key] = racer
    return out


def union_keys(*indexes: dict[str, Racer]) -> list[str]:
    """Every key known to any index, once each, in first-seen order."""
    seen: dict[str, None] = {}
    for index in indexes:
        for key in index:
            seen.setdefault(key, None)
    return list(seen)
