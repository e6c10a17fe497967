"""Release identifiers.

A release id is the UTC time of the deploy formatted ``YYYYMMDDHHMMSS``.
The fixed width makes lexicographic order equal chronological order.

INVARIANT: release directories are never renamed after creation.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime

RELEASE_ID_FORMAT = "%Y%m%d%H%M%S"
RELEASE_ID_PATTERN = re.compile(r"^\d{14}$")


def new_release_id(now: datetime | None = None) -> str:
    """Return the release id for *now* (default: current UTC time)."""
    moment = now if now is not None else datetime.now(UTC)
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return f"{moment.year:04d}{moment.strftime('%m%d%H%M%S')}"


def is_release_id(name: str) -> bool:
    """Check whether *name* looks like a release directory name."""
    return RELEASE_ID_PATTERN.match(name) is not None
