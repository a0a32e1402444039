"""Per-type storage metadata: collection names and identifier fields.

Both lookups are memoized for the lifetime of the process, keyed by the model
class itself. Concurrent first calls may compute the same answer twice, but
every caller sees the same value.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Optional, Type, TypeVar

from loguru import logger
from pydantic import BaseModel
from pydantic.fields import FieldInfo

from .errors import ConfigurationError

ID_KEY = "_id"
FALLBACK_ID_NAMES = ("Id", "id", "_id")
COLLECTION_ATTRIBUTE = "__collection__"

_ModelT = TypeVar("_ModelT", bound=type)


class MongoId:
    """Marks the identifier field of an entity through ``Annotated`` metadata.

    Example::

        class Order(BaseModel):
            number: Annotated[int, MongoId()]
            customer: str
    """

    def __repr__(self) -> str:
        return "MongoId()"


@dataclass(frozen=True)
class IdentifierField:
    """Where an entity keeps its identifier and how pydantic names it."""

    name: str
    dump_key: str
    load_key: str
    annotation: Any

    def value_of(self, entity: BaseModel) -> Any:
        return getattr(entity, self.name)


def collection(name: str) -> Callable[[_ModelT], _ModelT]:
    """Class decorator pinning the collection an entity type is stored in."""

    if not isinstance(name, str) or not name:
        raise ConfigurationError("collection name must be a non-empty string")

    def decorator(cls: _ModelT) -> _ModelT:
        setattr(cls, COLLECTION_ATTRIBUTE, name)
        return cls

    return decorator


@lru_cache(maxsize=None)
def resolve_collection_name(model: type) -> str:
    """Return the explicit collection name of ``model``, else its class name.

    Only the class's own namespace is consulted: a subclass of a decorated
    model is stored under its own name unless it is decorated as well.
    """

    explicit = vars(model).get(COLLECTION_ATTRIBUTE)
    return explicit or model.__name__


def _dump_key(name: str, info: FieldInfo) -> str:
    return info.serialization_alias or info.alias or name


def _load_key(name: str, info: FieldInfo) -> str:
    if isinstance(info.validation_alias, str):
        return info.validation_alias
    return info.alias or name


def _is_marked(info: FieldInfo) -> bool:
    if any(isinstance(item, MongoId) or item is MongoId for item in info.metadata):
        return True
    return ID_KEY in (info.alias, info.serialization_alias, info.validation_alias)


def _find_identifier(model: Type[BaseModel]) -> Optional[str]:
    fields = model.model_fields
    for name, info in fields.items():
        if _is_marked(info):
            return name
    for name in FALLBACK_ID_NAMES:
        if name in fields:
            return name
    return None


@lru_cache(maxsize=None)
def resolve_identifier_field(model: type) -> IdentifierField:
    """Locate the identifier field of ``model``.

    A field marked with ``MongoId`` (or aliased to ``_id``) wins; otherwise the
    first of ``Id``, ``id``, ``_id`` declared on the model is used. Failures
    are not cached, so every call for an unusable type raises again.
    """

    if not (isinstance(model, type) and issubclass(model, BaseModel)):
        raise ConfigurationError(
            f"{model!r} is not a pydantic model; entity types must subclass BaseModel"
        )

    name = _find_identifier(model)
    if name is None:
        raise ConfigurationError(f"The primary key of {model.__name__} can not be found.")

    info = model.model_fields[name]
    field = IdentifierField(
        name=name,
        dump_key=_dump_key(name, info),
        load_key=_load_key(name, info),
        annotation=info.annotation,
    )
    logger.debug("Resolved identifier of {} to field {!r}", model.__name__, name)
    return field


@lru_cache(maxsize=None)
def field_dump_keys(model: type) -> dict:
    """Map each field name of ``model`` to the key it is stored under."""

    return {name: _dump_key(name, info) for name, info in model.model_fields.items()}


@lru_cache(maxsize=None)
def field_load_keys(model: type) -> frozenset:
    """Keys ``model.model_validate`` accepts; anything else is ignored on read."""

    return frozenset(_load_key(name, info) for name, info in model.model_fields.items())
