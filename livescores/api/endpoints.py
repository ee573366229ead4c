"""Sport catalogue, date helpers and typed fetch functions for the scoreboard API."""

from __future__ import annotations

import re
from datetime import datetime
from zoneinfo import ZoneInfo

from livescores.api.client import ScoreboardClient
from livescores.api.models import ScoreboardKey

# sport code -> (ESPN path, default groups)
SPORTS: dict[str, tuple[str, str]] = {
    "cfb": ("/football/college-football/scoreboard", "80,81"),  # FBS + FCS
    "cbb": ("/basketball/mens-college-basketball/scoreboard", "50"),  # Men's D-I
}
SCOREBOARD_LIMIT = 3000

_DATE_RE = re.compile(r"^(\d{4})-?(\d{2})-?(\d{2})$")


def normalize_sport(sport: str | None, default: str = "cfb") -> str:
    """Lower-case ``sport``; anything unknown becomes ``default``."""
    s = (sport or "").strip().lower()
    return s if s in SPORTS else default


def normalize_date(date: str) -> str:
    """Accept ``YYYY-MM-DD`` or ``YYYYMMDD`` and return ``YYYYMMDD``.

    Raises ValueError for anything that is not a real calendar date.
    """
    m = _DATE_RE.match(date.strip())
    if not m:
        raise ValueError(f"Invalid date {date!r}, expected YYYY-MM-DD or YYYYMMDD")
    compact = "".join(m.groups())
    datetime.strptime(compact, "%Y%m%d")
    return compact


def current_date(tz: str = "America/New_York") -> str:
    """Today's date in the reference timezone, compact form."""
    return datetime.now(ZoneInfo(tz)).strftime("%Y%m%d")


def make_key(
    sport: str | None,
    date: str | None,
    *,
    default_sport: str = "cfb",
    tz: str = "America/New_York",
) -> ScoreboardKey:
    """Build a cache/subscription key from raw query values."""
    d = normalize_date(date) if date else current_date(tz)
    return ScoreboardKey(sport=normalize_sport(sport, default_sport), date=d)


async def get_scoreboard(client: ScoreboardClient, key: ScoreboardKey) -> dict:
    """Fetch the raw scoreboard document for one sport and day."""
    path, groups = SPORTS[key.sport]
    params = {"dates": key.date, "groups": groups, "limit": SCOREBOARD_LIMIT}
    return await client.get(path, params=params)
