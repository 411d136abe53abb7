"""
Database connection management and explicit database contexts.

This module provides:
- A pooled MongoDB client created lazily from settings
- ``DatabaseContexts``, which resolves logical context aliases to database handles
- Connectivity checks for the provisioning commands
"""
from typing import Iterator, Mapping, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure

from schema_provision.core.config import settings
from schema_provision.core.exceptions import StoreConnectionError, UnknownContextError
from schema_provision.log.logging import logger


class DatabaseContexts(Mapping[str, AsyncIOMotorDatabase]):
    """
    Maps logical context aliases (``common``, ``order_service``) to database handles.

    Operations receive a handle from here instead of relying on a selected
    "current" database.
    """

    def __init__(self, client: AsyncIOMotorClient, names: Mapping[str, str]):
        self._client = client
        self._names = dict(names)
        self._databases: dict[str, AsyncIOMotorDatabase] = {}

    def __getitem__(self, alias: str) -> AsyncIOMotorDatabase:
        if alias not in self._names:
            raise UnknownContextError(alias, sorted(self._names))
        if alias not in self._databases:
            self._databases[alias] = self._client[self._names[alias]]
        return self._databases[alias]

    def __contains__(self, alias: object) -> bool:
        return alias in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def database_name(self, alias: str) -> str:
        """Get the concrete database name configured for an alias."""
        if alias not in self._names:
            raise UnknownContextError(alias, sorted(self._names))
        return self._names[alias]

    def names(self) -> dict[str, str]:
        """Get the alias to database name mapping."""
        return dict(self._names)


class DatabaseManager:
    """
    Manages the MongoDB client used for provisioning.
    """

    _instance: Optional["DatabaseManager"] = None
    _client: Optional[AsyncIOMotorClient] = None

    def __new__(cls) -> "DatabaseManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def client(self) -> AsyncIOMotorClient:
        """Get or create the MongoDB client."""
        if self._client is None:
            self._client = AsyncIOMotorClient(
                settings.mongodb,
                # Connection pool settings
                maxPoolSize=settings.mongo_max_pool_size,
                minPoolSize=settings.mongo_min_pool_size,
                # Timeouts
                connectTimeoutMS=settings.mongo_connect_timeout_ms,
                serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
                socketTimeoutMS=settings.mongo_socket_timeout_ms,
                retryWrites=True,
                retryReads=True,
            )
        return self._client

    def contexts(self, names: Optional[Mapping[str, str]] = None) -> DatabaseContexts:
        """
        Build the database contexts for the configured client.

        Args:
            names: Alias to database name mapping, defaults to the settings.
        """
        return DatabaseContexts(self.client, names or settings.database_contexts)

    async def ping(self) -> None:
        """
        Check that the server is reachable.

        Raises:
            StoreConnectionError: If the server cannot be reached.
        """
        try:
            await self.client.admin.command("ping")
        except ConnectionFailure as e:
            logger.error(
                "Database ping failed",
                event_type="database_unreachable",
                error=str(e),
            )
            raise StoreConnectionError(
                "MongoDB server is unreachable", details={"error": str(e)}
            ) from e
        logger.debug("Database connection established", event_type="database_ping")

    async def close(self) -> None:
        """Close the database connection."""
        if self._client:
            self._client.close()
            self._client = None
            logger.info("Database connection closed", event_type="database_closed")


# Singleton instance
db_manager = DatabaseManager()
