import pytest
from unittest.mock import AsyncMock, MagicMock
from pymongo.errors import CollectionInvalid, DuplicateKeyError, OperationFailure

from schema_provision.core.database import DatabaseContexts

COMMON_DB = "pp_common_db_stage"
ORDER_DB = "order_service_dev"


def _matches(document, partial_filter):
    return all(document.get(key) == value for key, value in partial_filter.items())


# In-memory MongoDB fakes
class FakeCollection:
    """Collection double that enforces unique indexes on insert and index build."""

    def __init__(self, database, name):
        self.database = database
        self.name = name
        self.documents = []
        self.indexes = {"_id_": {"key": [("_id", 1)], "v": 2}}

    def _unique_indexes(self):
        return [
            spec
            for spec in self.indexes.values()
            if spec.get("unique") and len(spec["key"]) == 1
        ]

    async def create_index(
        self, keys, name=None, unique=False, partialFilterExpression=None, **kwargs
    ):
        self.database._touch(self.name)
        key = list(keys)
        name = name or "_".join(f"{k}_{d}" for k, d in key)

        for existing_name, spec in self.indexes.items():
            if (
                spec["key"] == key
                and existing_name != name
                and spec.get("partialFilterExpression") == partialFilterExpression
            ):
                raise OperationFailure("Index already exists with a different name", code=85)
            if existing_name == name and (
                spec["key"] != key or spec.get("unique", False) != unique
            ):
                raise OperationFailure("An existing index has the same name", code=86)

        if unique and len(key) == 1:
            field = key[0][0]
            values = [
                doc[field]
                for doc in self.documents
                if field in doc and _matches(doc, partialFilterExpression or {})
            ]
            if len(values) != len(set(values)):
                raise OperationFailure(
                    f"E11000 duplicate key error collection: {self.database.name}.{self.name}",
                    code=11000,
                )

        spec = {"key": key, "v": 2}
        if unique:
            spec["unique"] = True
        if partialFilterExpression:
            spec["partialFilterExpression"] = dict(partialFilterExpression)
        self.indexes[name] = spec
        return name

    async def index_information(self):
        return {name: dict(spec) for name, spec in self.indexes.items()}

    async def insert_one(self, document):
        self.database._touch(self.name)
        for spec in self._unique_indexes():
            field = spec["key"][0][0]
            partial_filter = spec.get("partialFilterExpression", {})
            if field not in document or not _matches(document, partial_filter):
                continue
            if any(
                doc.get(field) == document[field] and _matches(doc, partial_filter)
                for doc in self.documents
            ):
                raise DuplicateKeyError(
                    f"E11000 duplicate key error collection: {self.database.name}.{self.name}",
                    code=11000,
                )
        self.documents.append(dict(document))
        return MagicMock(inserted_id=len(self.documents))


class FakeDatabase:
    """Database double tracking which collections exist."""

    def __init__(self, name):
        self.name = name
        self.collections = {}
        self.create_collection_calls = 0

    def _touch(self, name):
        self.collections.setdefault(name, FakeCollection(self, name))

    def __getitem__(self, name):
        if name in self.collections:
            return self.collections[name]
        return _LazyCollection(self, name)

    async def list_collection_names(self):
        return list(self.collections)

    async def create_collection(self, name):
        self.create_collection_calls += 1
        if name in self.collections:
            raise CollectionInvalid(f"collection {name} already exists")
        self._touch(name)
        return self.collections[name]


class _LazyCollection(FakeCollection):
    """Collection handle that only materialises on first write, like MongoDB."""

    def __init__(self, database, name):
        super().__init__(database, name)

    def _real(self):
        self.database._touch(self.name)
        return self.database.collections[self.name]

    async def create_index(self, keys, name=None, unique=False, **kwargs):
        return await self._real().create_index(keys, name=name, unique=unique, **kwargs)

    async def insert_one(self, document):
        return await self._real().insert_one(document)


class FakeClient:
    """Client double handing out one database per name."""

    def __init__(self):
        self.databases = {}

    def __getitem__(self, name):
        return self.databases.setdefault(name, FakeDatabase(name))


@pytest.fixture
def db_names():
    """Database names the common and order service contexts resolve to."""
    return {"common": COMMON_DB, "order_service": ORDER_DB}


@pytest.fixture
def fake_database():
    """Factory for standalone in-memory databases."""
    return FakeDatabase


@pytest.fixture
def fake_client():
    """An empty in-memory MongoDB client."""
    return FakeClient()


@pytest.fixture
def contexts(fake_client, db_names):
    """Database contexts backed by the in-memory client."""
    return DatabaseContexts(fake_client, db_names)


# Mock fixtures
@pytest.fixture
def mock_db():
    """Create a mock MongoDB database."""
    db = MagicMock()
    db.name = COMMON_DB
    collection = MagicMock()
    collection.create_index = AsyncMock()
    collection.index_information = AsyncMock(return_value={"_id_": {"key": [("_id", 1)]}})
    db.__getitem__ = MagicMock(return_value=collection)
    db.list_collection_names = AsyncMock(return_value=[])
    db.create_collection = AsyncMock()
    return db, collection
