"""
Read-only verification of the provisioned schema.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from pymongo.errors import ConnectionFailure

from schema_provision.core.database import DatabaseContexts
from schema_provision.core.exceptions import StoreConnectionError
from schema_provision.log.logging import logger
from schema_provision.migrations import products_orders
from schema_provision.migrations.models import CollectionSpec, UniqueIndexSpec
from schema_provision.migrations.operations import has_unique_index


class IssueKind(str, Enum):
    """Kind of schema drift found by verification."""

    MISSING_COLLECTION = "missing_collection"
    MISSING_UNIQUE_INDEX = "missing_unique_index"
    FOREIGN_COLLECTION = "foreign_collection"


@dataclass
class SchemaIssue:
    """A single post-condition that does not hold."""

    kind: IssueKind
    context: str
    database: str
    collection: str
    field: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "context": self.context,
            "database": self.database,
            "collection": self.collection,
            "field": self.field,
        }


async def verify_schema(
    contexts: DatabaseContexts,
    collections: Iterable[CollectionSpec] = products_orders.COLLECTIONS,
    unique_indexes: Iterable[UniqueIndexSpec] = products_orders.UNIQUE_INDEXES,
) -> list[SchemaIssue]:
    """
    Check that every collection and unique index is present in its own context only.

    Args:
        contexts: Database handles to inspect.
        collections: Collections that must exist.
        unique_indexes: Unique indexes that must exist.

    Returns:
        Issues found, empty if the schema matches.

    Raises:
        StoreConnectionError: If the server cannot be reached.
    """
    collections = list(collections)
    unique_indexes = list(unique_indexes)
    issues: list[SchemaIssue] = []

    owners = {spec.name: spec.context for spec in collections}
    aliases = sorted({spec.context for spec in collections})

    try:
        for alias in aliases:
            db = contexts[alias]
            present = set(await db.list_collection_names())

            for spec in collections:
                if spec.context == alias and spec.name not in present:
                    issues.append(
                        SchemaIssue(IssueKind.MISSING_COLLECTION, alias, db.name, spec.name)
                    )

            # Collections owned by another context must not leak into this one
            for name, owner in owners.items():
                if owner != alias and name in present:
                    issues.append(
                        SchemaIssue(IssueKind.FOREIGN_COLLECTION, alias, db.name, name)
                    )

        for spec in unique_indexes:
            db = contexts[spec.context]
            if not await has_unique_index(db, spec.collection, spec.field):
                issues.append(
                    SchemaIssue(
                        IssueKind.MISSING_UNIQUE_INDEX,
                        spec.context,
                        db.name,
                        spec.collection,
                        field=spec.field,
                    )
                )

    except ConnectionFailure as e:
        logger.error(
            "Schema verification failed",
            event_type="verify_failed",
            error=str(e),
        )
        raise StoreConnectionError(
            "MongoDB server is unreachable", details={"error": str(e)}
        ) from e

    logger.info(
        f"Schema verification found {len(issues)} issue(s)",
        event_type="verify_complete",
        issues=len(issues),
    )
    return issues
