# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: State store data access.
Holds users, groups, skip weeks and rotations in memory and persists them
as one atomic JSON snapshot. NO business rules here — pure CRUD.
"""

import os
import tempfile
from typing import Optional

from pydantic import ValidationError

from rotation_scheduler.core.logging import get_logger
from rotation_scheduler.models.domain import (
    Group,
    Rotation,
    SkipWeek,
    StateSnapshot,
    User,
)

logger = get_logger(__name__)


class StateRepository:
    """In-memory state with snapshot persistence to an optional JSON file."""

    def __init__(self, data_file: str = "") -> None:
        self._data_file = data_file
        self._users: dict[str, User] = {}
        self._groups: dict[str, Group] = {}
        self._skip_weeks: dict[tuple[str, str, str], SkipWeek] = {}
        self._rotations: dict[str, Rotation] = {}
        self._dirty = False

    # ── Users ──

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._users.values() if u.email == email), None)

    def list_users(self) -> list[User]:
        return list(self._users.values())

    def save_user(self, user: User) -> None:
        self._users[user.id] = user

    # ── Groups ──

    def get_group(self, group_id: str) -> Optional[Group]:
        return self._groups.get(group_id)

    def list_groups(self) -> list[Group]:
        return list(self._groups.values())

    def save_group(self, group: Group) -> None:
        self._groups[group.id] = group

    def count_groups(self) -> int:
        return len(self._groups)

    # ── Skip weeks ──

    def has_skip(self, user_id: str, group_id: str, period_start: str) -> bool:
        return (user_id, group_id, period_start) in self._skip_weeks

    def list_skip_weeks(
        self,
        group_id: Optional[str] = None,
        period_start: Optional[str] = None,
    ) -> list[SkipWeek]:
        result = list(self._skip_weeks.values())
        if group_id:
            result = [s for s in result if s.group_id == group_id]
        if period_start:
            result = [s for s in result if s.period_start == period_start]
        return result

    def add_skip_week(self, skip: SkipWeek) -> None:
        self._skip_weeks[skip.key] = skip

    # ── Rotations ──

    def get_rotation(self, rotation_id: str) -> Optional[Rotation]:
        return self._rotations.get(rotation_id)

    def find_rotation(
        self, group_id: str, period_start: str, assigned_user_id: str
    ) -> Optional[Rotation]:
        return next(
            (
                r for r in self._rotations.values()
                if r.group_id == group_id
                and r.period_start == period_start
                and r.assigned_user_id == assigned_user_id
            ),
            None,
        )

    def list_rotations(
        self,
        group_id: Optional[str] = None,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[Rotation]:
        result = list(self._rotations.values())
        if group_id:
            result = [r for r in result if r.group_id == group_id]
        if user_id:
            result = [r for r in result if r.assigned_user_id == user_id]
        if status:
            result = [r for r in result if r.status == status]
        return sorted(result, key=lambda r: (r.period_start, r.created_at))

    def add_rotation(self, rotation: Rotation) -> None:
        self._rotations[rotation.id] = rotation

    def delete_rotation(self, rotation_id: str) -> Optional[Rotation]:
        return self._rotations.pop(rotation_id, None)

    def count_rotations(self) -> int:
        return len(self._rotations)

    # ── Snapshot ──

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            users=self.list_users(),
            groups=self.list_groups(),
            skip_weeks=list(self._skip_weeks.values()),
            rotations=list(self._rotations.values()),
        )

    def restore(self, snapshot: StateSnapshot) -> None:
        self._users = {u.id: u for u in snapshot.users}
        self._groups = {g.id: g for g in snapshot.groups}
        self._skip_weeks = {s.key: s for s in snapshot.skip_weeks}
        self._rotations = {r.id: r for r in snapshot.rotations}

    @property
    def dirty(self) -> bool:
        """True while the last save failed and memory is ahead of disk."""
        return self._dirty

    def load(self) -> None:
        """Load the snapshot file, or start fresh and write an empty one."""
        if not self._data_file:
            return
        try:
            with open(self._data_file, "r", encoding="utf-8") as fh:
                snapshot = StateSnapshot.model_validate_json(fh.read())
        except FileNotFoundError:
            logger.info("No state file at %s, starting fresh", self._data_file)
            self.save()
            return
        except (OSError, ValidationError) as exc:
            logger.error("State file %s unreadable: %s", self._data_file, exc)
            raise
        self.restore(snapshot)
        logger.info(
            "State loaded: users=%d, groups=%d, rotations=%d",
            len(self._users), len(self._groups), len(self._rotations),
        )

    def save(self) -> bool:
        """Atomically replace the snapshot file. Returns False on failure."""
        if not self._data_file:
            return True
        payload = self.snapshot().model_dump_json(indent=2)
        directory = os.path.dirname(os.path.abspath(self._data_file))
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self._data_file)
        except OSError:
            logger.exception("State save failed, keeping in-memory state")
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            self._dirty = True
            return False
        self._dirty = False
        return True

    # ── Bulk / internal ──

    def clear(self) -> None:
        self._users.clear()
        self._groups.clear()
        self._skip_weeks.clear()
        self._rotations.clear()
        self._dirty = False
