"""Tests for settings, logging configuration and error classes."""

from schema_provision.core.config import Settings
from schema_provision.core.exceptions import (
    ConstraintViolationError,
    ErrorCode,
    IndexConflictError,
    MigrationError,
    StoreConnectionError,
)
from schema_provision.log.logging import configure_logging, logger


class TestSettings:
    """Tests for Settings."""

    def test_default_database_contexts(self):
        """Test the default context names."""
        settings = Settings()

        assert settings.database_contexts == {
            "common": settings.common_database,
            "order_service": settings.order_service_database,
        }

    def test_context_names_from_constructor(self):
        """Test overriding database names."""
        settings = Settings(common_database="pp_common_db_prod", order_service_database="orders")

        assert settings.database_contexts == {
            "common": "pp_common_db_prod",
            "order_service": "orders",
        }

    def test_logging_config_development(self):
        """Test that development forces human-readable logs."""
        settings = Settings(environment="development", json_logs=True, debug=False)

        config = settings.logging_config

        assert config["json_logs"] is False
        assert config["log_level"] == "INFO"

    def test_logging_config_production(self):
        """Test that other environments keep the configured format."""
        settings = Settings(environment="production", json_logs=True, log_level="WARNING")

        config = settings.logging_config

        assert config["json_logs"] is True
        assert config["log_level"] == "WARNING"


class TestLogging:
    """Tests for loguru configuration."""

    def test_structured_fields_reach_extra(self):
        """Test that keyword context is recorded as extra fields."""
        records = []
        configure_logging({"app_name": "test", "log_level": "DEBUG", "json_logs": True})
        sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
        try:
            logger.info("Collection created", event_type="collection_created", collection="x")
        finally:
            logger.remove(sink_id)
            configure_logging()

        assert records[0]["extra"]["event_type"] == "collection_created"
        assert records[0]["extra"]["app_name"] == "test"


class TestErrors:
    """Tests for the exception hierarchy."""

    def test_constraint_violation_names_collection_and_field(self):
        """Test that the violation message names what blocked the index."""
        error = ConstraintViolationError("pp_common_db_stage", "products", "sku")

        assert isinstance(error, MigrationError)
        assert error.code == ErrorCode.CONSTRAINT_VIOLATION
        assert "products.sku" in str(error)
        assert error.to_dict()["details"]["field"] == "sku"

    def test_index_conflict(self):
        """Test IndexConflictError payload."""
        error = IndexConflictError("order_service_dev", "orders", "orderNumber", reason="85")

        assert error.to_dict() == {
            "error": "IndexConflictError",
            "code": ErrorCode.INDEX_CONFLICT,
            "message": error.message,
            "details": {
                "database": "order_service_dev",
                "collection": "orders",
                "field": "orderNumber",
                "reason": "85",
            },
        }

    def test_connection_error_code(self):
        """Test StoreConnectionError code and default details."""
        error = StoreConnectionError("unreachable")

        assert error.code == ErrorCode.DATABASE_CONNECTION_ERROR
        assert error.details == {}
