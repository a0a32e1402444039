"""Typed MongoDB collection access for pydantic entity models.

Example usage in a domain package:

    from typing import Annotated
    from uuid import UUID, uuid4

    from pydantic import BaseModel, Field
    from mongo_entities import MongoAccessor, MongoId, collection

    @collection("orders")
    class Order(BaseModel):
        number: Annotated[UUID, MongoId()] = Field(default_factory=uuid4)
        status: str = "open"

    accessor = MongoAccessor.from_settings()
    accessor.insert_one(Order())
    open_orders = accessor.query(Order).where({"status": "open"}).to_list()
"""

from .accessor import AsyncMongoAccessor, MongoAccessor
from .codecs import (
    LOCAL_TIMEZONE,
    LocalTimezone,
    build_codec_options,
    resolve_timezone,
    resolve_uuid_representation,
)
from .errors import ConfigurationError, InvalidArgumentError, MongoEntitiesError
from .filters import identifier_filter, render_identifier_filter
from .metadata import (
    IdentifierField,
    MongoId,
    collection,
    resolve_collection_name,
    resolve_identifier_field,
)
from .mongo import (
    async_ping,
    get_async_database,
    get_async_mongo_client,
    get_database,
    get_mongo_client,
    ping,
)
from .query import AsyncEntityQuery, EntityQuery
from .settings import MongoSettings, default_settings

__all__ = [
    "LOCAL_TIMEZONE",
    "AsyncEntityQuery",
    "AsyncMongoAccessor",
    "ConfigurationError",
    "EntityQuery",
    "IdentifierField",
    "InvalidArgumentError",
    "LocalTimezone",
    "MongoAccessor",
    "MongoEntitiesError",
    "MongoId",
    "MongoSettings",
    "async_ping",
    "build_codec_options",
    "collection",
    "default_settings",
    "get_async_database",
    "get_async_mongo_client",
    "get_database",
    "get_mongo_client",
    "identifier_filter",
    "ping",
    "render_identifier_filter",
    "resolve_collection_name",
    "resolve_identifier_field",
    "resolve_timezone",
    "resolve_uuid_representation",
]
