"""Data models for feed documents and items."""

import enum
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class Item:
    """One feed entry. Equal iff all five fields are equal."""
    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    pub_date: Optional[str] = None  # raw string as found in the feed


@dataclass(frozen=True)
class FeedDocument:
    """Parsed feed plus the raw body it was parsed from."""
    items: Tuple[Item, ...]
    raw: bytes = field(repr=False)


class RunOutcome(enum.Enum):
    """How a successful run ended."""
    NO_CHANGES = "no_changes"
    NOTIFIED = "notified"
