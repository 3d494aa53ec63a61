"""
Index set configuration and rotation metadata models.

Models:
    IndexSetConfig: Identity and naming of one rotating index set
    IndexRotationSnapshot: Immutable view of which aliases point where
"""

import re
from datetime import datetime
from typing import Dict, FrozenSet, List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from logalert.models.timeranges import utc_now

DEFLECTOR_SUFFIX = "deflector"
SEPARATOR = "_"

INDEX_PREFIX_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_+-]*$")


class IndexSetConfig(BaseModel):
    """
    Configuration of a single index set.

    Attributes:
        id: Unique index set identifier.
        title: Human-readable title.
        index_prefix: Prefix of every partition in the set (e.g., "graylog").
        description: Optional free-text description.

    Example:
        >>> config = IndexSetConfig(id="default", title="Default", index_prefix="graylog")
    """

    model_config = {"frozen": True, "extra": "forbid"}

    id: str = Field(
        ...,
        description="Unique index set identifier",
        min_length=1,
    )
    title: str = Field(
        default="",
        description="Human-readable title",
    )
    index_prefix: str = Field(
        ...,
        description="Prefix of every partition in this set",
        min_length=1,
    )
    description: Optional[str] = Field(
        default=None,
        description="Free-text description",
    )

    @field_validator("index_prefix")
    @classmethod
    def validate_index_prefix(cls, v: str) -> str:
        """Index prefixes must be valid lowercase index names."""
        if not INDEX_PREFIX_PATTERN.match(v):
            raise ValueError(
                f"Invalid index prefix {v!r}: must be lowercase and start "
                "with a letter or digit"
            )
        return v


class IndexRotationSnapshot(BaseModel):
    """
    Point-in-time view of the partitions of an index set.

    Maps every known partition to the aliases pointing at it. A snapshot is
    never modified; rotation produces a new snapshot.

    Attributes:
        aliases: Partition name to the set of aliases pointing at it.
        taken_at: When this view was captured.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    aliases: Dict[str, FrozenSet[str]] = Field(
        default_factory=dict,
        description="Partition name to aliases pointing at it",
    )
    taken_at: datetime = Field(
        default_factory=utc_now,
        description="When this view was captured",
    )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> "IndexRotationSnapshot":
        """
        Build a snapshot from an ``index -> aliases`` mapping.

        Accepts any iterable of alias names per index.
        """
        return cls(
            aliases={index: frozenset(names or ()) for index, names in mapping.items()}
        )

    @property
    def index_names(self) -> List[str]:
        return list(self.aliases.keys())

    def indices_for_alias(self, alias: str) -> List[str]:
        """All partitions the given alias points at."""
        return [index for index, names in self.aliases.items() if alias in names]
