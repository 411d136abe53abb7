"""
Collection and unique index primitives.

Every operation takes the target database handle explicitly and is idempotent:
an object that is already present is reported as ``OperationOutcome.EXISTS``.
"""

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import (
    CollectionInvalid,
    ConnectionFailure,
    DuplicateKeyError,
    OperationFailure,
)

from schema_provision.core.exceptions import (
    ConstraintViolationError,
    IndexConflictError,
    SchemaOperationError,
    StoreConnectionError,
)
from schema_provision.log.logging import logger
from schema_provision.migrations.models import OperationOutcome, unique_index_name

# Server error codes
NAMESPACE_EXISTS = 48
INDEX_OPTIONS_CONFLICT = 85
INDEX_KEY_SPECS_CONFLICT = 86
DUPLICATE_KEY = 11000


def _connection_error(db: AsyncIOMotorDatabase, error: ConnectionFailure) -> StoreConnectionError:
    logger.error(
        "Lost connection to MongoDB",
        event_type="database_unreachable",
        database=db.name,
        error=str(error),
    )
    return StoreConnectionError(
        f"MongoDB server is unreachable while provisioning {db.name}",
        details={"database": db.name, "error": str(error)},
    )


async def ensure_collection(db: AsyncIOMotorDatabase, name: str) -> OperationOutcome:
    """
    Create a collection unless it already exists.

    Args:
        db: Database the collection belongs to.
        name: Collection name.

    Returns:
        ``CREATED`` if the collection was created, ``EXISTS`` otherwise.

    Raises:
        StoreConnectionError: If the server cannot be reached.
        SchemaOperationError: If the server rejects the creation.
    """
    try:
        if name in await db.list_collection_names():
            logger.debug(
                f"Collection {db.name}.{name} already exists",
                event_type="collection_exists",
                database=db.name,
                collection=name,
            )
            return OperationOutcome.EXISTS

        await db.create_collection(name)

    except ConnectionFailure as e:
        raise _connection_error(db, e) from e
    except CollectionInvalid:
        # Created concurrently between the listing and the create call
        return OperationOutcome.EXISTS
    except OperationFailure as e:
        if e.code == NAMESPACE_EXISTS:
            return OperationOutcome.EXISTS
        logger.error(
            f"Failed to create collection {db.name}.{name}",
            event_type="collection_create_failed",
            database=db.name,
            collection=name,
            error=str(e),
        )
        raise SchemaOperationError(
            f"Failed to create collection {name} in {db.name}",
            details={"database": db.name, "collection": name, "error": str(e)},
        ) from e

    logger.info(
        f"Collection {db.name}.{name} created",
        event_type="collection_created",
        database=db.name,
        collection=name,
    )
    return OperationOutcome.CREATED


async def has_unique_index(db: AsyncIOMotorDatabase, collection: str, field: str) -> bool:
    """
    Check whether ``collection`` has a unique single-field index on ``field``.

    A missing collection has no indexes. Partial and sparse indexes do not count,
    they only enforce uniqueness on a subset of the documents.
    """
    if collection not in await db.list_collection_names():
        return False

    info = await db[collection].index_information()
    for spec in info.values():
        keys = [key for key, _ in spec.get("key", [])]
        if spec.get("partialFilterExpression") or spec.get("sparse", False):
            continue
        if keys == [field] and spec.get("unique", False):
            return True
    return False


async def ensure_unique_index(
    db: AsyncIOMotorDatabase, collection: str, field: str
) -> OperationOutcome:
    """
    Create a unique ascending index on ``collection.field`` unless one exists.

    Args:
        db: Database the collection belongs to.
        collection: Collection name.
        field: Field that must be unique across the collection.

    Returns:
        ``CREATED`` if the index was built, ``EXISTS`` if it was already present.

    Raises:
        StoreConnectionError: If the server cannot be reached.
        ConstraintViolationError: If documents already share a value for ``field``.
        IndexConflictError: If an incompatible index already uses the key or name.
        SchemaOperationError: If the server rejects the index for another reason.
    """
    try:
        if await has_unique_index(db, collection, field):
            logger.debug(
                f"Unique index on {db.name}.{collection}.{field} already exists",
                event_type="index_exists",
                database=db.name,
                collection=collection,
                field=field,
            )
            return OperationOutcome.EXISTS

        await db[collection].create_index(
            [(field, ASCENDING)],
            name=unique_index_name(field),
            unique=True,
        )

    except ConnectionFailure as e:
        raise _connection_error(db, e) from e
    except DuplicateKeyError as e:
        logger.error(
            f"Duplicate values block unique index on {db.name}.{collection}.{field}",
            event_type="index_constraint_violation",
            database=db.name,
            collection=collection,
            field=field,
            error=str(e),
        )
        raise ConstraintViolationError(db.name, collection, field, reason=str(e)) from e
    except OperationFailure as e:
        if e.code == DUPLICATE_KEY:
            logger.error(
                f"Duplicate values block unique index on {db.name}.{collection}.{field}",
                event_type="index_constraint_violation",
                database=db.name,
                collection=collection,
                field=field,
                error=str(e),
            )
            raise ConstraintViolationError(db.name, collection, field, reason=str(e)) from e
        if e.code in (INDEX_OPTIONS_CONFLICT, INDEX_KEY_SPECS_CONFLICT):
            logger.error(
                f"Conflicting index on {db.name}.{collection}.{field}",
                event_type="index_conflict",
                database=db.name,
                collection=collection,
                field=field,
                error=str(e),
            )
            raise IndexConflictError(db.name, collection, field, reason=str(e)) from e
        logger.error(
            f"Failed to create unique index on {db.name}.{collection}.{field}",
            event_type="index_create_failed",
            database=db.name,
            collection=collection,
            field=field,
            error=str(e),
        )
        raise SchemaOperationError(
            f"Failed to create unique index on {collection}.{field} in {db.name}",
            details={
                "database": db.name,
                "collection": collection,
                "field": field,
                "error": str(e),
            },
        ) from e

    logger.info(
        f"Unique index on {db.name}.{collection}.{field} created",
        event_type="index_created",
        database=db.name,
        collection=collection,
        field=field,
    )
    return OperationOutcome.CREATED
