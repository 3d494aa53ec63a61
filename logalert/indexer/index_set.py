"""
Alias-based index set.

Partitions of an index set are named ``<prefix>_<n>`` and the write alias
``<prefix>_deflector`` points at the current write target. Rotation creates
``<prefix>_<n+1>`` and moves the alias; that happens outside this process.

The index set keeps a reference to an immutable IndexRotationSnapshot.
Each read operation takes the reference once, so every answer is consistent
with a single snapshot even while a refresh swaps in a new one. There is no
lock shared between the refresher and readers.

Example:
    >>> index_set = AliasIndexSet(IndexSetConfig(id="default", index_prefix="graylog"))
    >>> index_set.update_snapshot(IndexRotationSnapshot.from_mapping({
    ...     "graylog_0": [],
    ...     "graylog_1": ["graylog_deflector"],
    ... }))
    >>> index_set.get_current_actual_target_index()
    'graylog_1'
"""

import re
from typing import List, Optional

import structlog

from logalert.exceptions import NoTargetIndexError, TooManyAliasesError
from logalert.interfaces.index_set import IndexMetadataSource, IndexSet
from logalert.models.indices import (
    DEFLECTOR_SUFFIX,
    SEPARATOR,
    IndexRotationSnapshot,
    IndexSetConfig,
)

logger = structlog.get_logger(__name__)


class AliasIndexSet(IndexSet):
    """
    IndexSet resolved from write-alias metadata.

    Attributes:
        config: Index set configuration.
        snapshot: The rotation metadata currently in use.
    """

    def __init__(
        self,
        config: IndexSetConfig,
        snapshot: Optional[IndexRotationSnapshot] = None,
    ) -> None:
        self._config = config
        self._snapshot = snapshot or IndexRotationSnapshot()
        self._index_pattern = re.compile(
            rf"^{re.escape(config.index_prefix)}{SEPARATOR}(\d+)$"
        )

    @property
    def config(self) -> IndexSetConfig:
        return self._config

    @property
    def snapshot(self) -> IndexRotationSnapshot:
        return self._snapshot

    @property
    def write_index_alias(self) -> str:
        return f"{self.index_prefix}{SEPARATOR}{DEFLECTOR_SUFFIX}"

    @property
    def write_index_wildcard(self) -> str:
        return f"{self.index_prefix}{SEPARATOR}*"

    def update_snapshot(self, snapshot: IndexRotationSnapshot) -> None:
        """
        Replace the rotation metadata.

        A single reference assignment: readers see either the old or the
        new snapshot, never a mix.
        """
        self._snapshot = snapshot
        logger.debug(
            "index_set_snapshot_updated",
            index_set_id=self.id,
            indices=len(snapshot.aliases),
        )

    async def refresh(self, source: IndexMetadataSource) -> IndexRotationSnapshot:
        """
        Pull fresh rotation metadata and swap it in.

        Args:
            source: Where to read the alias layout from.

        Returns:
            IndexRotationSnapshot: The snapshot now in use.

        Raises:
            SearchBackendError: If the metadata cannot be fetched. The
                previous snapshot stays in use.
        """
        snapshot = await source.get_index_aliases(self.write_index_wildcard)
        self.update_snapshot(snapshot)
        return snapshot

    def _index_number(self, index_name: str) -> Optional[int]:
        match = self._index_pattern.match(index_name)
        if match is None:
            return None
        return int(match.group(1))

    def get_all_index_names(self) -> List[str]:
        snapshot = self._snapshot
        managed = [name for name in snapshot.index_names if self.is_managed_index(name)]
        return sorted(managed, key=lambda name: self._index_number(name) or 0)

    def is_managed_index(self, index_name: str) -> bool:
        return self._index_number(index_name) is not None

    def is_write_index_alias(self, index_name: str) -> bool:
        return index_name == self.write_index_alias

    def get_current_actual_target_index(self) -> Optional[str]:
        snapshot = self._snapshot
        targets = snapshot.indices_for_alias(self.write_index_alias)

        if len(targets) > 1:
            logger.error(
                "index_set_ambiguous_write_alias",
                index_set_id=self.id,
                alias=self.write_index_alias,
                indices=sorted(targets),
            )
            raise TooManyAliasesError(self.write_index_alias, targets)

        if not targets:
            return None
        return targets[0]

    def get_newest_index_number(self) -> int:
        snapshot = self._snapshot
        numbers = [
            number
            for number in (self._index_number(name) for name in snapshot.index_names)
            if number is not None
        ]
        if not numbers:
            raise NoTargetIndexError(
                f"Index set <{self.id}> has no indices with prefix <{self.index_prefix}>"
            )
        return max(numbers)

    def get_newest_index(self) -> str:
        """Name of the highest numbered partition."""
        return f"{self.index_prefix}{SEPARATOR}{self.get_newest_index_number()}"

    def is_up(self) -> bool:
        try:
            return self.get_current_actual_target_index() is not None
        except TooManyAliasesError:
            return False

    def __repr__(self) -> str:
        return f"AliasIndexSet(id={self.id!r}, index_prefix={self.index_prefix!r})"
