"""Conditional writes on receipt ranges."""

from typing import Any, Dict, Optional

from django.db.models import F
from django.utils import timezone

from apps.ranges.models import ReceiptRange


def compare_and_swap(
    *,
    org_id: str,
    range_id: str,
    expected_version: int,
    expected_next: Optional[int] = None,
    changes: Dict[str, Any]
) -> bool:
    """
    Apply ``changes`` to a range only if it is still at the expected state.

    Issues a single ``UPDATE ... WHERE version = ? [AND next_number = ?]``;
    the row count tells whether this writer won. ``version`` is always
    incremented and ``updated_at`` refreshed.

    Args:
        org_id: Organization of the range
        range_id: Range to update
        expected_version: Version read before computing ``changes``
        expected_next: Cursor read before computing ``changes``, if the
            write depends on it
        changes: Field values to set

    Returns:
        True if the row was updated, False if another writer got there first
        (or the range no longer exists)
    """
    queryset = ReceiptRange.objects.filter(
        org_id=org_id,
        range_id=range_id,
        version=expected_version,
    )
    if expected_next is not None:
        queryset = queryset.filter(next_number=expected_next)

    updated = queryset.update(
        **changes,
        version=F('version') + 1,
        updated_at=timezone.now(),
    )
    return updated == 1
