"""Compute new feed items and prepare them for the notification mail."""

import dataclasses
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_tz
from typing import List, Optional, Sequence

from .models import FeedDocument, Item

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
WEEKDAYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


def diff_items(new_doc: FeedDocument, old_doc: FeedDocument) -> List[Item]:
    """
    Return the items of ``new_doc`` that are not in ``old_doc``.

    Items are compared by value over all five fields. Order follows
    ``new_doc``; items that disappeared from the feed are not reported.
    """
    seen = set(old_doc.items)
    return [item for item in new_doc.items if item not in seen]


def _parse_rfc2822(value: str) -> Optional[datetime]:
    """
    Parse a strict RFC 2822 date into an aware datetime.

    Returns None when there is no usable zone or when a weekday is given
    that does not match the date.
    """
    try:
        parsed = parsedate_tz(value)
    except (TypeError, ValueError):
        return None
    if parsed is None:
        return None

    offset = parsed[9]
    if offset is None:
        # parsedate_tz reports "-0000" as no offset; it still means UTC
        if not value.rstrip().endswith("-0000"):
            return None
        offset = 0
    try:
        date = datetime(*parsed[:6], tzinfo=timezone(timedelta(seconds=offset)))
    except (ValueError, OverflowError):
        return None

    if "," in value:
        weekday = value.split(",", 1)[0].strip().lower()
        if weekday not in WEEKDAYS or WEEKDAYS.index(weekday) != date.weekday():
            return None
    return date


def convert_pub_date(value: Optional[str]) -> Optional[str]:
    """
    Reformat an RFC 2822 date as local ``YYYY-MM-DD HH:MM:SS``.

    Anything that does not parse is returned unchanged, including None.
    """
    if value is None:
        return None
    date = _parse_rfc2822(value)
    if date is None:
        return value
    return date.astimezone().strftime(DATE_FORMAT)


def transform_items(items: Sequence[Item]) -> List[Item]:
    """Return presentation copies of ``items`` with reformatted dates."""
    return [dataclasses.replace(item, pub_date=convert_pub_date(item.pub_date)) for item in items]
