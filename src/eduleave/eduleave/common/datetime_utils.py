from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def parse_iso_date(value) -> Optional[date]:
    """Parse 'YYYY-MM-DD' (or a full ISO timestamp) into a date.

    The spreadsheet backend returns date cells either as plain dates or as
    ISO timestamps, so anything after the 'T' is ignored.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip().split("T")[0]
    return datetime.strptime(text, "%Y-%m-%d").date()


def parse_iso_datetime(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def format_iso_date(value: Optional[date]) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


def format_iso_datetime(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def epoch_millis(moment: datetime) -> int:
    if moment.tzinfo is None:
        return int(moment.timestamp() * 1000)
    return int(moment.astimezone(timezone.utc).timestamp() * 1000)
