"""Display-name and profile-link helpers shared by the views."""

import re
from urllib.parse import quote

RACER_URL_TEMPLATE = "https://www.nitrotype.com/racer/{slug}"
TEAM_URL_TEMPLATE = "https://www.nitrotype.com/team/{tag}"

_SLUG_SEPARATORS_RE = re.compile(r"[_-]+")


def pretty_name_from_slug(slug: str) -> str:
    """Turn ``fast_typer-99`` into ``Fast Typer 99``."""
    text = str(slug or "").strip()
    if not text:
        return ""
    words = _SLUG_SEPARATORS_RE.sub(" ", text).split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def racer_url(slug: str) -> str:
    return RACER_URL_TEMPLATE.format(slug=quote(str(slug or ""), safe=""))


def team_url(tag: str) -> str:
    return TEAM_URL_TEMPLATE.format(tag=quote(str(tag or ""), safe=""))
