"""Conversion between entity models and stored documents."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Type

from pydantic import BaseModel

from .errors import InvalidArgumentError
from .metadata import (
    ID_KEY,
    field_dump_keys,
    field_load_keys,
    resolve_identifier_field,
)
from .typing import EntityT, MongoDocument, UpdateExpression


def to_document(entity: BaseModel) -> Dict[str, Any]:
    """Dump ``entity`` with its identifier moved under ``_id``.

    A ``None`` identifier is left out; inserts generate one.
    """

    field = resolve_identifier_field(type(entity))
    data = entity.model_dump(by_alias=True)
    value = data.pop(field.dump_key, None)
    document: Dict[str, Any] = {} if value is None else {ID_KEY: value}
    document.update(data)
    return document


def from_document(model: Type[EntityT], document: MongoDocument) -> EntityT:
    """Validate a stored document into ``model``, ignoring unknown keys."""

    field = resolve_identifier_field(model)
    known = field_load_keys(model)
    data: Dict[str, Any] = {}
    for key, value in document.items():
        if key == ID_KEY:
            data[field.load_key] = value
        elif key in known and key != field.load_key:
            data[key] = value
    return model.model_validate(data)


def set_document(entity: BaseModel) -> Dict[str, Any]:
    """Build a ``$set`` of every stored field of ``entity`` except ``_id``."""

    values = to_document(entity)
    values.pop(ID_KEY, None)
    return {"$set": values}


def _plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True)
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def to_update_document(model: type, update: UpdateExpression) -> Dict[str, Any]:
    """Turn an update expression into a driver update document.

    Operator documents (every key starts with ``$``) are returned as given.
    Plain ``field -> value`` mappings and partially constructed models are
    translated to stored keys and wrapped in ``$set``.
    """

    field = resolve_identifier_field(model)

    if isinstance(update, BaseModel):
        if not isinstance(update, model):
            raise InvalidArgumentError(
                f"update must be a {model.__name__} instance, got {type(update).__name__}"
            )
        values = update.model_dump(by_alias=True, exclude_unset=True)
    elif isinstance(update, Mapping):
        keys = [str(key) for key in update]
        operators = [key for key in keys if key.startswith("$")]
        if operators:
            if len(operators) != len(keys):
                raise InvalidArgumentError(
                    "update cannot mix operator keys with plain field names"
                )
            return dict(update)
        dump_keys = field_dump_keys(model)
        values = {dump_keys.get(key, key): _plain(value) for key, value in update.items()}
    else:
        raise InvalidArgumentError(
            f"update must be a mapping or a {model.__name__} instance"
        )

    if ID_KEY in values or field.dump_key in values:
        raise InvalidArgumentError("update cannot change the identifier field")
    if not values:
        raise InvalidArgumentError("update does not set any field")
    return {"$set": values}
