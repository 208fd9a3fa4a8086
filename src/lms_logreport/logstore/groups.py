"""
Group membership lookup.
"""

import logging
from abc import ABC, abstractmethod

from ..config.constants import TABLE_GROUPS_MEMBERS
from ..storage import StorageBackend

logger = logging.getLogger(__name__)


class GroupMembership(ABC):
    """Resolves the members of a course group."""

    @abstractmethod
    def members_of(self, group_id: int) -> set[int]:
        """Return the user ids currently in the group."""
        pass


class StorageGroupMembership(GroupMembership):
    """Group membership read from the ``groups_members`` table."""

    def __init__(self, backend: StorageBackend, table: str = TABLE_GROUPS_MEMBERS):
        self._backend = backend
        self._table = table

    def members_of(self, group_id: int) -> set[int]:
        rows = self._backend.query(
            f"SELECT userid FROM {self._table} WHERE groupid = :groupid",
            {"groupid": group_id},
        )
        members = {row["userid"] for row in rows}
        logger.debug(f"Group {group_id} has {len(members)} members")
        return members


class StaticGroupMembership(GroupMembership):
    """In-memory membership, for hosts that already hold the groups."""

    def __init__(self, groups: dict[int, set[int]] | None = None):
        self._groups = {gid: set(members) for gid, members in (groups or {}).items()}

    def members_of(self, group_id: int) -> set[int]:
        return set(self._groups.get(group_id, set()))
