"""
Schema specs and operation results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class OperationOutcome(str, Enum):
    """Outcome of a single provisioning operation."""

    CREATED = "created"
    EXISTS = "exists"
    PLANNED = "planned"


class OperationKind(str, Enum):
    """Kind of schema object an operation provisions."""

    COLLECTION = "collection"
    INDEX = "index"


@dataclass(frozen=True)
class CollectionSpec:
    """
    A collection that must exist in a database context.

    Attributes:
        context: Logical context alias the collection belongs to.
        name: Collection name.
    """

    context: str
    name: str


@dataclass(frozen=True)
class UniqueIndexSpec:
    """
    A single-field unique index that must exist on a collection.

    Attributes:
        context: Logical context alias the collection belongs to.
        collection: Collection name.
        field: Indexed field, ascending.
    """

    context: str
    collection: str
    field: str

    @property
    def name(self) -> str:
        return unique_index_name(self.field)


def unique_index_name(field: str) -> str:
    """Name given to the unique index on ``field``."""
    return f"idx_{field}_unique"


@dataclass
class OperationResult:
    """
    Record of one operation issued by a provisioning step.

    Attributes:
        kind: Whether a collection or an index was provisioned.
        context: Logical context alias.
        database: Concrete database name the context resolved to.
        collection: Collection name.
        outcome: Whether the object was created, already existed, or was only planned.
        field: Indexed field for index operations.
    """

    kind: OperationKind
    context: str
    database: str
    collection: str
    outcome: OperationOutcome
    field: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for output."""
        return {
            "kind": self.kind.value,
            "context": self.context,
            "database": self.database,
            "collection": self.collection,
            "field": self.field,
            "outcome": self.outcome.value,
        }


@dataclass
class StepReport:
    """
    Result of running a provisioning step.

    Attributes:
        version: Step version identifier.
        description: Human-readable description of the step.
        results: Operations in the order they were issued.
        execution_time_ms: How long the step took.
        dry_run: Whether the step ran without issuing writes.
    """

    version: str
    description: str
    results: list[OperationResult] = field(default_factory=list)
    execution_time_ms: int = 0
    dry_run: bool = False

    @property
    def created(self) -> list[OperationResult]:
        return [r for r in self.results if r.outcome == OperationOutcome.CREATED]

    @property
    def existing(self) -> list[OperationResult]:
        return [r for r in self.results if r.outcome == OperationOutcome.EXISTS]

    def to_dict(self) -> dict:
        """Convert to dictionary for output."""
        return {
            "version": self.version,
            "description": self.description,
            "dry_run": self.dry_run,
            "execution_time_ms": self.execution_time_ms,
            "created_count": len(self.created),
            "existing_count": len(self.existing),
            "results": [r.to_dict() for r in self.results],
        }
