"""Co-occurrence index of containers and the minifigures they hold."""

from __future__ import annotations

from collections import defaultdict
from logging import getLogger
from typing import TYPE_CHECKING

from brickbridge.domain.errors import InvalidIdentifierError, require_identifier
from brickbridge.domain.model import ContainerMembership

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

log = getLogger(__name__)


class CooccurrenceIndex:
    def __init__(self, memberships: Iterable[ContainerMembership]) -> None:
        self._containers: dict[str, ContainerMembership] = {}
        self._by_primary: defaultdict[str, set[str]] = defaultdict(set)
        self.skipped_invalid = 0
        for membership in memberships:
            self._add(membership)

    def _add(self, membership: ContainerMembership) -> None:
        try:
            container_id = require_identifier(membership.container_id, kind="container")
        except InvalidIdentifierError as exc:
            log.warning("Skipping container membership: %s", exc)
            self.skipped_invalid += 1
            return
        primary = self._clean_ids(membership.primary, container_id)
        secondary = self._clean_ids(membership.secondary, container_id)
        existing = self._containers.get(container_id)
        if existing is not None:
            primary |= existing.primary
            secondary |= existing.secondary
        self._containers[container_id] = ContainerMembership(
            container_id=container_id,
            primary=frozenset(primary),
            secondary=frozenset(secondary),
        )
        for primary_id in primary:
            self._by_primary[primary_id].add(container_id)

    def _clean_ids(self, ids: Iterable[str], container_id: str) -> set[str]:
        cleaned: set[str] = set()
        for raw in ids:
            try:
                cleaned.add(require_identifier(raw, kind="minifig"))
            except InvalidIdentifierError as exc:
                log.warning("Skipping minifig in container %s: %s", container_id, exc)
                self.skipped_invalid += 1
        return cleaned

    def __iter__(self) -> Iterator[ContainerMembership]:
        for container_id in sorted(self._containers):
            yield self._containers[container_id]

    def __len__(self) -> int:
        return len(self._containers)

    def get(self, container_id: str) -> ContainerMembership | None:
        return self._containers.get(container_id)

    def containers_of(self, primary_id: str) -> list[str]:
        return sorted(self._by_primary.get(primary_id, ()))

    def primary_ids(self) -> set[str]:
        return set(self._by_primary)

    def secondary_ids(self) -> set[str]:
        ids: set[str] = set()
        for membership in self._containers.values():
            ids |= membership.secondary
        return ids
