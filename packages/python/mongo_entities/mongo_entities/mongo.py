"""MongoDB client and database helpers built on PyMongo and Motor.

Only connection plumbing lives here; ``accessor`` builds the entity
operations on top of the database handles returned by ``get_database`` and
``get_async_database``."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Optional

from loguru import logger
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import MongoClient
from pymongo.database import Database

from .codecs import build_codec_options
from .settings import MongoSettings, default_settings


def _sanitize_mongodb_url(url: str) -> str:
    """Hide the password in a MongoDB URL for safe logging."""

    if "@" not in url or "://" not in url:
        return url
    protocol, rest = url.split("://", 1)
    credentials, host = rest.rsplit("@", 1)
    username = credentials.split(":", 1)[0]
    return f"{protocol}://{username}:***@{host}"


def create_mongo_client(config: MongoSettings) -> MongoClient:
    """Build a blocking client; ``client_options`` are passed through as-is."""

    logger.info("Creating MongoClient for {}", _sanitize_mongodb_url(config.uri))
    return MongoClient(config.uri, **config.client_options)


def create_async_mongo_client(config: MongoSettings) -> AsyncIOMotorClient:
    """Build a Motor client; ``client_options`` are passed through as-is."""

    logger.info("Creating AsyncIOMotorClient for {}", _sanitize_mongodb_url(config.uri))
    return AsyncIOMotorClient(config.uri, **config.client_options)


@lru_cache
def get_mongo_client() -> MongoClient:
    """Return a cached blocking client configured via ``default_settings``."""

    return create_mongo_client(default_settings)


@lru_cache
def get_async_mongo_client() -> AsyncIOMotorClient:
    """Return a cached Motor client configured via ``default_settings``."""

    return create_async_mongo_client(default_settings)


def get_database(
    config: Optional[MongoSettings] = None,
    client: Optional[MongoClient] = None,
) -> Database:
    """Return the configured database with the entity codecs applied."""

    config = config or default_settings
    if client is None:
        client = get_mongo_client() if config is default_settings else create_mongo_client(config)
    return client.get_database(config.db_name, codec_options=build_codec_options(config))


def get_async_database(
    config: Optional[MongoSettings] = None,
    client: Optional[AsyncIOMotorClient] = None,
) -> AsyncIOMotorDatabase:
    """Async counterpart of ``get_database``."""

    config = config or default_settings
    if client is None:
        client = (
            get_async_mongo_client()
            if config is default_settings
            else create_async_mongo_client(config)
        )
    return client.get_database(config.db_name, codec_options=build_codec_options(config))


def ping(database: Optional[Database] = None) -> dict[str, Any]:
    """Round-trip a ``ping`` to the server behind ``database`` (default: the configured one)."""

    db = get_database() if database is None else database
    db.command("ping")
    return {"ok": True}


async def async_ping(database: Optional[AsyncIOMotorDatabase] = None) -> dict[str, Any]:
    """Run a simple ``ping`` command through Motor."""

    db = get_async_database() if database is None else database
    await db.command("ping")
    return {"ok": True}
