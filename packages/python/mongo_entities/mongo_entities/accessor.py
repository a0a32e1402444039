"""Typed CRUD accessors over a MongoDB database.

``MongoAccessor`` wraps a PyMongo ``Database`` and ``AsyncMongoAccessor`` a
Motor ``AsyncIOMotorDatabase``. Both resolve the collection and identifier of
an entity from its model class and hand every request to the driver in a
single round trip:

    accessor = MongoAccessor.from_settings()
    accessor.insert_one(order)
    order.status = "shipped"
    accessor.update(order)
    accessor.update_many(Order, {"status": "archived"}, {"status": "shipped"})
    shipped = accessor.query(Order).where({"status": "archived"}).to_list()

Argument errors are raised before the driver is called; driver errors reach
the caller untouched.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type

from bson import ObjectId
from loguru import logger
from motor.motor_asyncio import AsyncIOMotorClient
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError
from pymongo import MongoClient

from .documents import set_document, to_document, to_update_document
from .errors import InvalidArgumentError
from .filters import identifier_filter, render_identifier_filter
from .metadata import (
    ID_KEY,
    IdentifierField,
    resolve_collection_name,
    resolve_identifier_field,
)
from .mongo import get_async_database, get_database
from .query import AsyncEntityQuery, EntityQuery
from .settings import MongoSettings
from .typing import EntityT, Predicate, UpdateExpression


def _require(value: Any, name: str) -> None:
    if value is None:
        raise InvalidArgumentError(f"{name} must not be None")


def _batch(entities: Optional[Iterable[BaseModel]]) -> Tuple[type, List[BaseModel]]:
    _require(entities, "entities")
    batch = list(entities)
    if not batch:
        raise InvalidArgumentError("entities must not be empty")
    if any(entity is None for entity in batch):
        raise InvalidArgumentError("entities must not contain None")
    model = type(batch[0])
    if any(type(entity) is not model for entity in batch):
        raise InvalidArgumentError("entities must all be of the same type")
    return model, batch


@lru_cache(maxsize=None)
def _identifier_adapter(model: type) -> TypeAdapter:
    annotation = resolve_identifier_field(model).annotation
    return TypeAdapter(annotation, config=ConfigDict(arbitrary_types_allowed=True))


def _generated_identifier(model: type) -> Any:
    """Return a fresh ``ObjectId`` in a form the identifier field accepts.

    ``str`` identifiers get the hex form. Returns None when the field takes
    neither, in which case the driver fills in ``_id`` on the stored document
    only and the entity is left untouched.
    """

    adapter = _identifier_adapter(model)
    generated = ObjectId()
    for candidate in (generated, str(generated)):
        try:
            value = adapter.validate_python(candidate)
        except ValidationError:
            continue
        if value is not None:
            return value
    return None


def _insert_document(entity: BaseModel) -> Tuple[Dict[str, Any], Any]:
    """Build the stored document, generating the identifier when it is unset."""

    document = to_document(entity)
    if ID_KEY in document:
        return document, None
    generated = _generated_identifier(type(entity))
    if generated is not None:
        document[ID_KEY] = generated
    return document, generated


def _assign_identifier(entity: BaseModel, generated: Any) -> None:
    if generated is not None:
        setattr(entity, resolve_identifier_field(type(entity)).name, generated)


class _AccessorBase:
    def __init__(self, database: Any) -> None:
        if database is None:
            raise InvalidArgumentError("database must not be None")
        self.database = database

    @property
    def uuid_representation(self) -> int:
        return self.database.codec_options.uuid_representation

    @staticmethod
    def resolve_collection_name(model: type) -> str:
        return resolve_collection_name(model)

    @staticmethod
    def resolve_identifier_field(model: type) -> IdentifierField:
        return resolve_identifier_field(model)

    def collection_for(self, model: type) -> Any:
        return self.database[resolve_collection_name(model)]

    def _target(self, entity: BaseModel, operation: str) -> Tuple[Any, dict]:
        _require(entity, "entity")
        model = type(entity)
        id_filter = identifier_filter(entity)
        logger.opt(lazy=True).debug(
            "{} {} where {}",
            lambda: operation,
            lambda: resolve_collection_name(model),
            lambda: render_identifier_filter(id_filter[ID_KEY], self.uuid_representation),
        )
        return self.collection_for(model), id_filter

    def _bulk_target(self, model: type, predicate: Predicate, operation: str) -> Any:
        resolve_identifier_field(model)
        logger.debug(
            "{} {} where {!r}", operation, resolve_collection_name(model), predicate
        )
        return self.collection_for(model)


class MongoAccessor(_AccessorBase):
    """Blocking accessor backed by a PyMongo database."""

    @classmethod
    def from_settings(
        cls,
        config: Optional[MongoSettings] = None,
        client: Optional[MongoClient] = None,
    ) -> "MongoAccessor":
        return cls(get_database(config, client=client))

    def query(self, model: Type[EntityT]) -> EntityQuery[EntityT]:
        """Return a lazy query over every document of ``model``'s collection."""

        _require(model, "model")
        resolve_identifier_field(model)
        return EntityQuery(self.collection_for(model), model)

    def insert_one(self, entity: BaseModel) -> None:
        _require(entity, "entity")
        model = type(entity)
        logger.debug("Insert one into {}", resolve_collection_name(model))
        document, generated = _insert_document(entity)
        self.collection_for(model).insert_one(document)
        _assign_identifier(entity, generated)

    def insert_many(self, entities: Iterable[BaseModel]) -> None:
        model, batch = _batch(entities)
        logger.debug("Insert {} into {}", len(batch), resolve_collection_name(model))
        prepared = [_insert_document(entity) for entity in batch]
        self.collection_for(model).insert_many([document for document, _ in prepared])
        for entity, (_, generated) in zip(batch, prepared):
            _assign_identifier(entity, generated)

    def delete(self, entity: BaseModel) -> int:
        """Delete the stored document of ``entity``; returns 0 or 1."""

        collection, id_filter = self._target(entity, "Delete from")
        return collection.delete_one(id_filter).deleted_count

    def delete_many(self, model: type, predicate: Predicate) -> int:
        """Delete every document of ``model`` matching ``predicate``."""

        _require(model, "model")
        _require(predicate, "predicate")
        collection = self._bulk_target(model, predicate, "Delete many from")
        return collection.delete_many(predicate).deleted_count

    def update(self, entity: BaseModel) -> int:
        """Overwrite every stored field of ``entity``; returns the modified count."""

        collection, id_filter = self._target(entity, "Update")
        return collection.update_one(id_filter, set_document(entity)).modified_count

    def update_many(
        self, model: type, update: UpdateExpression, predicate: Predicate
    ) -> int:
        """Apply ``update`` to every document of ``model`` matching ``predicate``."""

        _require(model, "model")
        _require(update, "update")
        _require(predicate, "predicate")
        document = to_update_document(model, update)
        collection = self._bulk_target(model, predicate, "Update many in")
        return collection.update_many(predicate, document).modified_count


class AsyncMongoAccessor(_AccessorBase):
    """Awaitable accessor backed by a Motor database."""

    @classmethod
    def from_settings(
        cls,
        config: Optional[MongoSettings] = None,
        client: Optional[AsyncIOMotorClient] = None,
    ) -> "AsyncMongoAccessor":
        return cls(get_async_database(config, client=client))

    def query(self, model: Type[EntityT]) -> AsyncEntityQuery[EntityT]:
        """Return a lazy query over every document of ``model``'s collection."""

        _require(model, "model")
        resolve_identifier_field(model)
        return AsyncEntityQuery(self.collection_for(model), model)

    async def insert_one(self, entity: BaseModel) -> None:
        _require(entity, "entity")
        model = type(entity)
        logger.debug("Insert one into {}", resolve_collection_name(model))
        document, generated = _insert_document(entity)
        await self.collection_for(model).insert_one(document)
        _assign_identifier(entity, generated)

    async def insert_many(self, entities: Iterable[BaseModel]) -> None:
        model, batch = _batch(entities)
        logger.debug("Insert {} into {}", len(batch), resolve_collection_name(model))
        prepared = [_insert_document(entity) for entity in batch]
        await self.collection_for(model).insert_many([document for document, _ in prepared])
        for entity, (_, generated) in zip(batch, prepared):
            _assign_identifier(entity, generated)

    async def delete(self, entity: BaseModel) -> int:
        collection, id_filter = self._target(entity, "Delete from")
        result = await collection.delete_one(id_filter)
        return result.deleted_count

    async def delete_many(self, model: type, predicate: Predicate) -> int:
        _require(model, "model")
        _require(predicate, "predicate")
        collection = self._bulk_target(model, predicate, "Delete many from")
        result = await collection.delete_many(predicate)
        return result.deleted_count

    async def update(self, entity: BaseModel) -> int:
        collection, id_filter = self._target(entity, "Update")
        result = await collection.update_one(id_filter, set_document(entity))
        return result.modified_count

    async def update_many(
        self, model: type, update: UpdateExpression, predicate: Predicate
    ) -> int:
        _require(model, "model")
        _require(update, "update")
        _require(predicate, "predicate")
        document = to_update_document(model, update)
        collection = self._bulk_target(model, predicate, "Update many in")
        result = await collection.update_many(predicate, document)
        return result.modified_count
