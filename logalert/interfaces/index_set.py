"""
Abstract base classes for index sets and index set registries.

An IndexSet is a logically named, independently rotating collection of
physical partitions. Exactly one partition at a time is the current write
target; the write alias (deflector) always points at it.

An IndexSetRegistry puts one or more index sets behind a single read-only
surface so callers do not need to know how many sets exist or what their
rotation state is.
"""

from abc import ABC, abstractmethod
from typing import Iterator, List, Optional, Set

from logalert.models.indices import IndexRotationSnapshot, IndexSetConfig


class IndexMetadataSource(ABC):
    """Provides the current alias layout of the partitions matching a wildcard."""

    @abstractmethod
    async def get_index_aliases(self, index_wildcard: str) -> IndexRotationSnapshot:
        """
        Fetch the alias layout of all partitions matching ``index_wildcard``.

        Raises:
            SearchBackendError: If the metadata cannot be fetched.
        """
        pass


class IndexSet(ABC):
    """
    One rotating collection of partitions.

    All operations are pure reads over rotation metadata; querying an index
    set never changes partition membership.
    """

    @property
    @abstractmethod
    def config(self) -> IndexSetConfig:
        pass

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def index_prefix(self) -> str:
        return self.config.index_prefix

    @property
    @abstractmethod
    def write_index_alias(self) -> str:
        """Name of the alias pointing at the current write target."""
        pass

    @property
    @abstractmethod
    def write_index_wildcard(self) -> str:
        """Pattern matching every partition ever rotated under this set."""
        pass

    @abstractmethod
    def get_all_index_names(self) -> List[str]:
        """Names of all known partitions of this set."""
        pass

    @abstractmethod
    def is_managed_index(self, index_name: str) -> bool:
        """Check if a partition belongs to this set, current or historical."""
        pass

    @abstractmethod
    def is_write_index_alias(self, index_name: str) -> bool:
        pass

    @abstractmethod
    def get_current_actual_target_index(self) -> Optional[str]:
        """
        Resolve the write alias to the current write target.

        Returns:
            Optional[str]: The partition, or None if the alias points nowhere.

        Raises:
            TooManyAliasesError: If the alias points at more than one partition.
        """
        pass

    @abstractmethod
    def get_newest_index_number(self) -> int:
        """
        Highest partition number of this set.

        Raises:
            NoTargetIndexError: If the set has no partitions yet.
        """
        pass

    @abstractmethod
    def is_up(self) -> bool:
        """Check if the write alias resolves to exactly one partition."""
        pass


class IndexSetRegistry(ABC):
    """
    Uniform read-only surface over zero or more index sets.

    Iteration follows insertion order. Every aggregate answer is computed
    from one consistent view of the member sets.
    """

    @abstractmethod
    def get_all_index_sets(self) -> List[IndexSet]:
        pass

    def __iter__(self) -> Iterator[IndexSet]:
        return iter(self.get_all_index_sets())

    def __len__(self) -> int:
        return len(self.get_all_index_sets())

    def get(self, index_set_id: str) -> Optional[IndexSet]:
        for index_set in self.get_all_index_sets():
            if index_set.id == index_set_id:
                return index_set
        return None

    @abstractmethod
    def get_all_index_names(self) -> List[str]:
        pass

    @abstractmethod
    def is_managed_index(self, index_name: str) -> bool:
        pass

    @abstractmethod
    def get_write_index_wildcards(self) -> List[str]:
        pass

    @abstractmethod
    def get_write_index_aliases(self) -> List[str]:
        pass

    @abstractmethod
    def resolve_write_targets(self) -> Set[str]:
        """
        Current write target of every managed set.

        Raises:
            TooManyAliasesError: If any set's rotation metadata is inconsistent.
        """
        pass

    @abstractmethod
    def is_current_write_index_alias(self, index_name: str) -> bool:
        pass

    @abstractmethod
    def is_current_write_index(self, index_name: str) -> bool:
        """
        Check if the partition is the current write target of a managed set.

        Raises:
            TooManyAliasesError: If rotation metadata is inconsistent.
        """
        pass

    @abstractmethod
    def is_up(self) -> bool:
        pass
