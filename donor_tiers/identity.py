"""Session-lifetime record of which raw donor identities are the same person."""

from __future__ import annotations

import logging
from typing import Iterable

logger = logging.getLogger(__name__)


def _ordered_unique(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        ordered.append(value)
    return ordered


class IdentityStore:
    """Merge groups of raw identities, each headed by a primary identity.

    ``secondary -> primary`` and ``primary -> group`` are kept in step: every
    secondary points at a primary whose group contains it, and no identity
    belongs to two groups.
    """

    def __init__(self) -> None:
        self._secondary_to_primary: dict[str, str] = {}
        self._primary_to_group: dict[str, list[str]] = {}

    def resolve(self, identity: str) -> str:
        return self._secondary_to_primary.get(identity, identity)

    def is_merged_primary(self, identity: str) -> bool:
        return len(self._primary_to_group.get(identity, ())) > 1

    def group_for(self, identity: str) -> tuple[str, ...]:
        primary = self.resolve(identity)
        return tuple(self._primary_to_group.get(primary, (primary,)))

    @property
    def groups(self) -> dict[str, tuple[str, ...]]:
        return {primary: tuple(group) for primary, group in self._primary_to_group.items()}

    @property
    def secondary_to_primary(self) -> dict[str, str]:
        return dict(self._secondary_to_primary)

    def merge(self, identities: Iterable[str]) -> str:
        """Fold the identities (and any groups they head) under the first one.

        Returns the primary identity.
        """
        requested = _ordered_unique(identity for identity in identities if identity)
        if len(requested) < 2:
            raise ValueError("Select at least two donors to merge.")

        primary = requested[0]
        members: list[str] = []
        for identity in requested:
            for member in self._primary_to_group.get(identity, [identity]):
                if member not in members:
                    members.append(member)

        for member in members:
            owner = self._secondary_to_primary.get(member)
            if owner is not None and owner not in members:
                self._detach(member, owner)

        for identity in requested[1:]:
            self._primary_to_group.pop(identity, None)

        self._primary_to_group[primary] = members
        self._secondary_to_primary.pop(primary, None)
        for member in members:
            if member != primary:
                self._secondary_to_primary[member] = primary

        logger.info("Merged %d identities under %s.", len(members), primary)
        return primary

    def unmerge(self, identities: Iterable[str]) -> list[str]:
        """Dissolve every group headed by one of the identities.

        Identities that do not head a multi-member group are ignored. Returns
        the primaries whose groups were dissolved.
        """
        dissolved: list[str] = []
        for identity in _ordered_unique(identities):
            if not self.is_merged_primary(identity):
                continue
            for member in self._primary_to_group.pop(identity):
                self._secondary_to_primary.pop(member, None)
            dissolved.append(identity)

        if dissolved:
            logger.info("Dissolved merge group(s): %s.", ", ".join(dissolved))
        return dissolved

    def reset(self) -> None:
        self._secondary_to_primary.clear()
        self._primary_to_group.clear()

    def _detach(self, member: str, owner: str) -> None:
        del self._secondary_to_primary[member]
        group = self._primary_to_group.get(owner)
        if group is None:
            return
        if member in group:
            group.remove(member)
        if len(group) <= 1:
            del self._primary_to_group[owner]
