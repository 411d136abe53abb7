import os

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuration class for environment variables and provisioning settings.
    """

    # Service settings
    service_name: str = os.getenv("SERVICE_NAME", "schema_provision")
    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = os.getenv("DEBUG", "True").lower() == "true"

    # Logging settings
    log_level: str = os.getenv("LOG_LEVEL", "DEBUG")
    json_logs: bool = os.getenv("JSON_LOGS", "True").lower() == "true"

    # MongoDB settings
    mongodb: str = os.getenv("MONGODB", "mongodb://localhost:27017")

    # Logical database contexts
    common_database: str = os.getenv("COMMON_DATABASE", "pp_common_db_stage")
    order_service_database: str = os.getenv("ORDER_SERVICE_DATABASE", "order_service_dev")

    # MongoDB connection pool settings
    mongo_max_pool_size: int = int(os.getenv("MONGO_MAX_POOL_SIZE", "10"))
    mongo_min_pool_size: int = int(os.getenv("MONGO_MIN_POOL_SIZE", "0"))
    mongo_connect_timeout_ms: int = int(os.getenv("MONGO_CONNECT_TIMEOUT_MS", "5000"))
    mongo_server_selection_timeout_ms: int = int(
        os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "5000")
    )
    mongo_socket_timeout_ms: int = int(os.getenv("MONGO_SOCKET_TIMEOUT_MS", "30000"))

    @property
    def database_contexts(self) -> dict[str, str]:
        """
        Returns the logical context alias to database name mapping.
        """
        return {
            "common": self.common_database,
            "order_service": self.order_service_database,
        }

    # Environment-specific logging configuration
    @property
    def logging_config(self) -> dict:
        """
        Returns logging configuration based on environment.
        """
        base_config = {
            "app_name": self.service_name,
            "log_level": self.log_level,
            "json_logs": self.json_logs,
        }

        if self.environment == "development":
            base_config.update({"json_logs": False, "log_level": "DEBUG" if self.debug else "INFO"})

        return base_config

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
