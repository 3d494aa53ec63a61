"""
Index set registries.

Registries:
    LegacyIndexSetRegistry: Adapts a single index set (the common case)
    MultiIndexSetRegistry: Aggregates several index sets in insertion order

The multi-set registry keeps its members in a tuple that is replaced, never
mutated, when sets are added or removed. Every aggregate operation reads
that tuple once, so an answer always reflects one complete membership.
"""

from typing import Iterable, List, Optional, Set, Tuple

import structlog

from logalert.interfaces.index_set import (
    IndexMetadataSource,
    IndexSet,
    IndexSetRegistry,
)

logger = structlog.get_logger(__name__)


class LegacyIndexSetRegistry(IndexSetRegistry):
    """Registry over exactly one index set."""

    def __init__(self, index_set: IndexSet) -> None:
        if index_set is None:
            raise ValueError("index_set must not be None")
        self.index_set = index_set

    def get_all_index_sets(self) -> List[IndexSet]:
        return [self.index_set]

    def get_all_index_names(self) -> List[str]:
        return self.index_set.get_all_index_names()

    def is_managed_index(self, index_name: str) -> bool:
        return self.index_set.is_managed_index(index_name)

    def get_write_index_wildcards(self) -> List[str]:
        return [self.index_set.write_index_wildcard]

    def get_write_index_aliases(self) -> List[str]:
        return [self.index_set.write_index_alias]

    def resolve_write_targets(self) -> Set[str]:
        target = self.index_set.get_current_actual_target_index()
        return {target} if target is not None else set()

    def is_current_write_index_alias(self, index_name: str) -> bool:
        return self.index_set.is_write_index_alias(index_name)

    def is_current_write_index(self, index_name: str) -> bool:
        current = self.index_set.get_current_actual_target_index()
        return current is not None and current == index_name

    def is_up(self) -> bool:
        return self.index_set.is_up()


class MultiIndexSetRegistry(IndexSetRegistry):
    """
    Registry aggregating any number of index sets.

    Example:
        >>> registry = MultiIndexSetRegistry([default_set, audit_set])
        >>> registry.get_write_index_wildcards()
        ['graylog_*', 'audit_*']
    """

    def __init__(self, index_sets: Optional[Iterable[IndexSet]] = None) -> None:
        self._index_sets: Tuple[IndexSet, ...] = ()
        for index_set in index_sets or ():
            self.add(index_set)

    def add(self, index_set: IndexSet) -> None:
        """
        Register an index set.

        Raises:
            ValueError: If an index set with the same id is already registered.
        """
        current = self._index_sets
        if any(member.id == index_set.id for member in current):
            raise ValueError(f"Index set <{index_set.id}> is already registered")
        self._index_sets = current + (index_set,)
        logger.info(
            "index_set_registered",
            index_set_id=index_set.id,
            index_prefix=index_set.index_prefix,
        )

    def remove(self, index_set_id: str) -> Optional[IndexSet]:
        """Unregister an index set; returns it, or None if unknown."""
        current = self._index_sets
        removed = next((member for member in current if member.id == index_set_id), None)
        if removed is not None:
            self._index_sets = tuple(member for member in current if member is not removed)
            logger.info("index_set_unregistered", index_set_id=index_set_id)
        return removed

    def get_all_index_sets(self) -> List[IndexSet]:
        return list(self._index_sets)

    def get_all_index_names(self) -> List[str]:
        names: List[str] = []
        for index_set in self._index_sets:
            names.extend(index_set.get_all_index_names())
        return names

    def is_managed_index(self, index_name: str) -> bool:
        return any(index_set.is_managed_index(index_name) for index_set in self._index_sets)

    def get_write_index_wildcards(self) -> List[str]:
        return [index_set.write_index_wildcard for index_set in self._index_sets]

    def get_write_index_aliases(self) -> List[str]:
        return [index_set.write_index_alias for index_set in self._index_sets]

    def resolve_write_targets(self) -> Set[str]:
        targets: Set[str] = set()
        for index_set in self._index_sets:
            target = index_set.get_current_actual_target_index()
            if target is not None:
                targets.add(target)
        return targets

    def is_current_write_index_alias(self, index_name: str) -> bool:
        return any(index_set.is_write_index_alias(index_name) for index_set in self._index_sets)

    def is_current_write_index(self, index_name: str) -> bool:
        for index_set in self._index_sets:
            if index_set.get_current_actual_target_index() == index_name:
                return True
        return False

    def is_up(self) -> bool:
        index_sets = self._index_sets
        return bool(index_sets) and all(index_set.is_up() for index_set in index_sets)


async def refresh_index_sets(
    registry: IndexSetRegistry,
    source: IndexMetadataSource,
) -> int:
    """
    Refresh the rotation snapshot of every index set in the registry.

    A set whose metadata cannot be fetched keeps its previous snapshot; the
    failure is logged and the remaining sets are still refreshed.

    Returns:
        int: Number of index sets refreshed successfully.
    """
    refreshed = 0
    for index_set in registry:
        refresh = getattr(index_set, "refresh", None)
        if refresh is None:
            continue
        try:
            await refresh(source)
            refreshed += 1
        except Exception as e:
            logger.error(
                "index_set_refresh_failed",
                index_set_id=index_set.id,
                error=str(e),
            )
    return refreshed
