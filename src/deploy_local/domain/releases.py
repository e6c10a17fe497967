"""Release ordering and rollback target selection."""

from __future__ import annotations

from collections.abc import Iterable


def releases_newest_first(names: Iterable[str]) -> list[str]:
    """Sort release directory names newest first.

    Release ids are fixed-width timestamps, so reverse lexicographic order
    is reverse chronological order.
    """
    return sorted(names, reverse=True)


def previous_release(names: Iterable[str]) -> str | None:
    """The release before the newest one, or None if there is none.

    Assumes the newest release is the one ``current`` points to; the link
    target itself is not consulted.

    Examples:
        >>> previous_release(["20230101000000", "20230103000000", "20230102000000"])
        '20230102000000'
        >>> previous_release(["20230101000000"]) is None
        True
    """
    ordered = releases_newest_first(names)
    if len(ordered) < 2:
        return None
    return ordered[1]
