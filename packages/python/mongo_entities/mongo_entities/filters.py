"""Identifier filters for single-entity operations.

``identifier_filter`` is what gets sent to the store: it embeds the native
identifier value and leaves its encoding to the database's codec options, so
the filter always matches the way the entity was written.

``render_identifier_filter`` produces the shell-style text of the same filter
for log output. It mirrors the driver's conventions by hand and is never used
to query.
"""

from __future__ import annotations

import json
from decimal import Decimal
from enum import Enum
from typing import Any, Dict
from uuid import UUID

from bson.binary import UuidRepresentation
from pydantic import BaseModel

from .errors import ConfigurationError
from .metadata import ID_KEY, resolve_identifier_field

UUID_TAGS = {
    UuidRepresentation.UNSPECIFIED: "UUID",
    UuidRepresentation.STANDARD: "UUID",
    UuidRepresentation.CSHARP_LEGACY: "CSUUID",
    UuidRepresentation.JAVA_LEGACY: "JUUID",
    UuidRepresentation.PYTHON_LEGACY: "PYUUID",
}

_NUMERIC_TYPES = (int, float, Decimal)


def identifier_value(entity: BaseModel) -> Any:
    return resolve_identifier_field(type(entity)).value_of(entity)


def identifier_filter(entity: BaseModel) -> Dict[str, Any]:
    """Return ``{"_id": <identifier value>}`` for ``entity``."""

    return {ID_KEY: identifier_value(entity)}


def render_identifier_value(
    value: Any, uuid_representation: int = UuidRepresentation.STANDARD
) -> str:
    if isinstance(value, Enum):
        value = value.value
    if value is None or isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, _NUMERIC_TYPES):
        return str(value)
    if isinstance(value, UUID):
        try:
            tag = UUID_TAGS[uuid_representation]
        except KeyError:
            raise ConfigurationError(
                f"Unknown UUID representation: {uuid_representation!r}"
            ) from None
        return f'{tag}("{value}")'
    return json.dumps(str(value))


def render_identifier_filter(
    value: Any, uuid_representation: int = UuidRepresentation.STANDARD
) -> str:
    """Render the identifier filter for ``value`` as shell-style JSON text.

    Numbers are embedded unquoted, UUIDs as a tagged literal whose tag depends
    on ``uuid_representation`` and everything else as a quoted string.
    """

    return f'{{"{ID_KEY}":{render_identifier_value(value, uuid_representation)}}}'
