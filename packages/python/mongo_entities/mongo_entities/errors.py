"""Errors raised by the entity accessor layer.

Driver failures (``pymongo.errors.*``) are not wrapped; they reach the caller
as raised by the driver.
"""


class MongoEntitiesError(Exception):
    """Base class for errors raised by ``mongo_entities`` itself."""


class InvalidArgumentError(MongoEntitiesError, ValueError):
    """Raised when a required entity, predicate or update argument is missing."""


class ConfigurationError(MongoEntitiesError):
    """Raised when an entity type or a serialization convention cannot be used."""
