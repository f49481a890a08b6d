"""Path helpers for repo-root-relative snapshot and config files."""

from __future__ import annotations

from pathlib import Path

ROOT_MARKERS = ("pyproject.toml", ".git")


def find_repo_root(start: Path | None = None) -> Path:
    current = (start or Path(__file__).resolve()).resolve()
    if current.is_file():
        current = current.parent

    for candidate in [current, *current.parents]:
        if any((candidate / marker).exists() for marker in ROOT_MARKERS):
            return candidate
    raise RuntimeError("Unable to determine repository root from current path")


def repo_root() -> Path:
    """Checkout root, or the working directory when installed outside a checkout."""
    try:
        return find_repo_root(Path(__file__).resolve())
    except RuntimeError:
        return Path.cwd()


def repo_file(*parts: str) -> Path:
    return repo_root().joinpath(*parts)


def data_dir() -> Path:
    """Default directory holding the published snapshot files."""
    return repo_file("data")
