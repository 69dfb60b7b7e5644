"""Conditional (compare-and-set) writes against aggregate tables.

The guard filters and the new values travel to the provider as one bulk
UPDATE; the number of matched rows is the only success signal. Nothing is
read first, so two callers cannot both pass the guard on the same row.
Guards on a missing value must use ``<field>__isnull=True``; an exact match
on ``None`` never matches a null column.
"""

from protean.utils.globals import current_domain
from protean.utils.query import Q


def compare_and_set(aggregate_cls, expected: dict, **changes) -> bool:
    """Apply ``changes`` to rows matching ``expected``. True if any row matched."""
    dao = current_domain.repository_for(aggregate_cls)._dao
    updated = dao._update_all(Q(**expected), changes)
    return updated > 0
