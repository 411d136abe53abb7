"""
MongoDB schema provisioning steps.

Steps receive explicit database context handles and create collections and
unique indexes idempotently.
"""

from schema_provision.migrations.models import OperationOutcome, StepReport
from schema_provision.migrations.verify import SchemaIssue, verify_schema

__all__ = ["OperationOutcome", "StepReport", "SchemaIssue", "verify_schema"]
