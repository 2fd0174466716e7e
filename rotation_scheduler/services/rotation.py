# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Rotation logic — pure computation, no side effects.
"""

from typing import Iterable

from rotation_scheduler.core.errors import AllSkipped, EmptyGroup
from rotation_scheduler.models.domain import Group, SkipWeek


def select_next(
    group: Group,
    skip_weeks: Iterable[SkipWeek],
    target_period: str,
) -> tuple[str, int]:
    """
    Return (assignee_user_id, new_cursor) for ``target_period``.
    Pure function — never touches ``group``; the caller commits the cursor.

    Scans at most one full lap from the cursor. Members with a skip week
    are passed over and lose their turn: the new cursor lands just past
    the assignee. Raises EmptyGroup / AllSkipped.
    """
    members = group.sorted_members()
    n = len(members)
    if n == 0:
        raise EmptyGroup(f"Group '{group.id}' has no members")

    skipped = {
        s.user_id
        for s in skip_weeks
        if s.group_id == group.id and s.period_start == target_period
    }
    for k in range(n):
        index = (group.cursor + k) % n
        candidate = members[index]
        if candidate.user_id not in skipped:
            return candidate.user_id, (index + 1) % n

    raise AllSkipped(
        f"Every member of group '{group.id}' has a skip week for {target_period}"
    )
