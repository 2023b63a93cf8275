"""Process-wide counters for object identifiers."""

from __future__ import annotations

from itertools import count

_guids = count(1)
_fuids = count(1)


def next_guid() -> int:
    """Return a fresh globally unique object id."""
    return next(_guids)


def next_fuid() -> int:
    """Return a fresh tensor family id; clones reuse their original's id."""
    return next(_fuids)