"""Base classes for domain layer.

Provides foundational abstractions for catalog records and value objects.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone


# ============================================================================
# Value Object Base
# ============================================================================


@dataclass(frozen=True)
class ValueObject(ABC):
    """Base class for value objects.

    Value objects are immutable and compared by their attributes,
    not by identity. They have no lifecycle and are interchangeable
    when their values are equal.

    Example:
        @dataclass(frozen=True)
        class Dimensions(ValueObject):
            length: str
            width: str
            height: str
    """

    pass


# ============================================================================
# Entity Base
# ============================================================================


def utcnow() -> datetime:
    """Current UTC timestamp."""
    return datetime.now(timezone.utc)


@dataclass(kw_only=True)
class Entity(ABC):
    """Base class for catalog records.

    Records have an integer identity assigned by the store. Two records
    are equal if they have the same type and id, regardless of their
    other attributes. An id of 0 means "not yet persisted".

    Attributes:
        id: Store-assigned identifier.
        date_created: Timestamp when the record was created.
        date_modified: Timestamp of last modification.
    """

    id: int = 0
    date_created: datetime = field(default_factory=utcnow, compare=False)
    date_modified: datetime = field(default_factory=utcnow, compare=False)

    def __eq__(self, other: object) -> bool:
        """Compare records by identity.

        Args:
            other: Object to compare with.

        Returns:
            True if other is same type with same id.
        """
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash record by identity.

        Returns:
            Hash of the record id.
        """
        return hash((self.__class__.__name__, self.id))

    @property
    def is_persisted(self) -> bool:
        """Whether the store has assigned an id."""
        return self.id > 0

    def _touch(self) -> None:
        """Update the modification timestamp."""
        self.date_modified = utcnow()
