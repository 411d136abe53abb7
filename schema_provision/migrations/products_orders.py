"""
Migration: Products and orders collections with unique business keys.
Created: 2025-08-01

This migration provisions:
- testing and products collections in the common database
- orders collection in the order service database
- unique indexes on products.sku and orders.orderNumber
"""

import time

from schema_provision.core.database import DatabaseContexts
from schema_provision.log.logging import logger
from schema_provision.migrations.models import (
    CollectionSpec,
    OperationKind,
    OperationOutcome,
    OperationResult,
    StepReport,
    UniqueIndexSpec,
)
from schema_provision.migrations.operations import ensure_collection, ensure_unique_index

# Metadata
version = "2025.08.01.01"
description = "Create products and orders collections with unique sku and orderNumber"

COMMON = "common"
ORDER_SERVICE = "order_service"

COLLECTIONS = [
    CollectionSpec(COMMON, "testing"),
    CollectionSpec(COMMON, "products"),
    CollectionSpec(ORDER_SERVICE, "orders"),
]

UNIQUE_INDEXES = [
    UniqueIndexSpec(COMMON, "products", "sku"),
    UniqueIndexSpec(ORDER_SERVICE, "orders", "orderNumber"),
]

COMPLETION_MESSAGE = "Collections created successfully"


async def up(contexts: DatabaseContexts, dry_run: bool = False) -> StepReport:
    """
    Apply migration - create collections and unique indexes.

    Args:
        contexts: Database handles for the ``common`` and ``order_service`` contexts.
        dry_run: If True, report the operations without issuing them.

    Returns:
        Report of every operation in the order it was issued.
    """
    report = StepReport(version=version, description=description, dry_run=dry_run)
    start_time = time.time()

    async def collection(alias: str, name: str) -> None:
        db = contexts[alias]
        if dry_run:
            outcome = OperationOutcome.PLANNED
        else:
            outcome = await ensure_collection(db, name)
        report.results.append(
            OperationResult(OperationKind.COLLECTION, alias, db.name, name, outcome)
        )

    async def unique_index(alias: str, name: str, field: str) -> None:
        db = contexts[alias]
        if dry_run:
            outcome = OperationOutcome.PLANNED
        else:
            outcome = await ensure_unique_index(db, name, field)
        report.results.append(
            OperationResult(OperationKind.INDEX, alias, db.name, name, outcome, field=field)
        )

    # Common database
    await collection(COMMON, "testing")
    await collection(COMMON, "products")
    await unique_index(COMMON, "products", "sku")

    # Order service database
    await collection(ORDER_SERVICE, "orders")
    await unique_index(ORDER_SERVICE, "orders", "orderNumber")

    report.execution_time_ms = int((time.time() - start_time) * 1000)

    if dry_run:
        logger.info(
            f"[DRY RUN] Migration {version} would issue {len(report.results)} operations",
            event_type="migration_dry_run",
            version=version,
        )
    else:
        logger.info(
            COMPLETION_MESSAGE,
            event_type="migration_applied",
            version=version,
            created=len(report.created),
            existing=len(report.existing),
            execution_time_ms=report.execution_time_ms,
        )

    return report
