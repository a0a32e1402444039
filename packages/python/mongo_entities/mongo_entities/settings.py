"""Configuration for the MongoDB client and the entity codecs.

Applications can create a new ``MongoSettings`` instance at startup and pass it
to ``MongoAccessor.from_settings`` to override the defaults below, which are
read from the environment. The values are read once when a client or accessor
is built and never consulted afterwards.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict

from dotenv import find_dotenv, load_dotenv
from loguru import logger
from pydantic import BaseModel, Field

# Search for the nearest .env so running from subdirectories still loads root config.
load_dotenv(find_dotenv(usecwd=True))


def _default_client_options() -> Dict[str, Any]:
    """Parse ``MONGO_CLIENT_OPTIONS`` (a JSON object) into client kwargs."""

    raw = os.getenv("MONGO_CLIENT_OPTIONS")
    if not raw:
        return {}
    options = json.loads(raw)
    if not isinstance(options, dict):
        raise ValueError("MONGO_CLIENT_OPTIONS must be a JSON object")
    return options


class MongoSettings(BaseModel):
    """Connection target plus the serialization conventions applied to it."""

    uri: str = Field(
        default_factory=lambda: os.getenv("MONGO_URI", "mongodb://localhost:27017")
    )
    db_name: str = Field(default_factory=lambda: os.getenv("MONGO_DB_NAME", "entities"))

    # One of: standard, unspecified, python_legacy, java_legacy, csharp_legacy.
    uuid_representation: str = Field(
        default_factory=lambda: os.getenv("MONGO_UUID_REPRESENTATION", "standard")
    )
    # "utc" or "local": timezone attached to datetimes decoded from the store.
    datetime_kind: str = Field(
        default_factory=lambda: os.getenv("MONGO_DATETIME_KIND", "utc")
    )

    # Passed through untouched to the driver's client constructor.
    client_options: Dict[str, Any] = Field(default_factory=_default_client_options)

    model_config = {"frozen": True}


default_settings = MongoSettings()
logger.debug(
    "MongoSettings initialized with db_name={} uuid_representation={} datetime_kind={}",
    default_settings.db_name,
    default_settings.uuid_representation,
    default_settings.datetime_kind,
)
