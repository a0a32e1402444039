"""Codec options registered on every database handle the package creates.

This is where value serializers live: UUIDs follow the configured byte
representation, datetimes come back timezone-aware in the configured zone,
``Decimal`` round-trips through ``Decimal128``, ``Enum`` members are
stored as their values, plain ``date`` values become midnight in the
configured zone, and nested pydantic models are stored as their dumps.
"""

from __future__ import annotations

import time as _time
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from decimal import Decimal
from enum import Enum
from functools import partial
from typing import Any, Optional, Union

from bson.binary import UuidRepresentation
from bson.codec_options import CodecOptions, TypeCodec, TypeRegistry
from bson.decimal128 import Decimal128
from pydantic import BaseModel

from .errors import ConfigurationError
from .settings import MongoSettings

UUID_REPRESENTATIONS = {
    "unspecified": UuidRepresentation.UNSPECIFIED,
    "standard": UuidRepresentation.STANDARD,
    "python_legacy": UuidRepresentation.PYTHON_LEGACY,
    "java_legacy": UuidRepresentation.JAVA_LEGACY,
    "csharp_legacy": UuidRepresentation.CSHARP_LEGACY,
}

DATETIME_KINDS = ("utc", "local")

_EPOCH = datetime(1970, 1, 1)


def resolve_uuid_representation(value: Union[str, int]) -> int:
    """Translate a configured UUID convention into the driver constant."""

    if isinstance(value, int) and not isinstance(value, bool):
        if value in UUID_REPRESENTATIONS.values():
            return value
        raise ConfigurationError(f"Unknown UUID representation: {value!r}")

    key = str(value).strip().lower().replace("-", "_")
    try:
        return UUID_REPRESENTATIONS[key]
    except KeyError:
        raise ConfigurationError(
            f"Unknown UUID representation {value!r}; expected one of "
            f"{', '.join(UUID_REPRESENTATIONS)}"
        ) from None


class LocalTimezone(tzinfo):
    """The host zone, with the UTC offset looked up for each instant.

    A fixed offset captured at startup would render datetimes from the other
    side of a daylight saving change with the wrong wall clock time.
    """

    def _local(self, dt: Optional[datetime]) -> _time.struct_time:
        if dt is None:
            return _time.localtime()
        return _time.localtime(_time.mktime(dt.replace(tzinfo=None).timetuple()))

    def utcoffset(self, dt: Optional[datetime]) -> timedelta:
        return timedelta(seconds=self._local(dt).tm_gmtoff)

    def dst(self, dt: Optional[datetime]) -> timedelta:
        local = self._local(dt)
        if local.tm_isdst > 0:
            return timedelta(seconds=local.tm_gmtoff + _time.timezone)
        return timedelta(0)

    def tzname(self, dt: Optional[datetime]) -> str:
        return self._local(dt).tm_zone

    def fromutc(self, dt: datetime) -> datetime:
        stamp = (dt.replace(tzinfo=None) - _EPOCH).total_seconds()
        offset = _time.localtime(stamp).tm_gmtoff
        return dt + timedelta(seconds=offset)

    def __repr__(self) -> str:
        return "LocalTimezone()"


LOCAL_TIMEZONE = LocalTimezone()


def resolve_timezone(kind: str) -> tzinfo:
    """Return the zone decoded datetimes are converted to (``utc`` or ``local``)."""

    normalized = str(kind).strip().lower()
    if normalized == "utc":
        return timezone.utc
    if normalized == "local":
        return LOCAL_TIMEZONE
    raise ConfigurationError(
        f"Unknown datetime kind {kind!r}; expected one of {', '.join(DATETIME_KINDS)}"
    )


class DecimalCodec(TypeCodec):
    python_type = Decimal
    bson_type = Decimal128

    def transform_python(self, value: Decimal) -> Decimal128:
        return Decimal128(value)

    def transform_bson(self, value: Decimal128) -> Decimal:
        return value.to_decimal()


def _fallback_encoder(value: Any, zone: tzinfo = timezone.utc) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True)
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time(), tzinfo=zone)
    return value


def build_type_registry(zone: tzinfo = timezone.utc) -> TypeRegistry:
    return TypeRegistry(
        [DecimalCodec()], fallback_encoder=partial(_fallback_encoder, zone=zone)
    )


def build_codec_options(config: MongoSettings) -> CodecOptions:
    """Assemble the codec options described by ``config``.

    Raises ``ConfigurationError`` for an unknown UUID convention or datetime
    kind, before any client is contacted.
    """

    zone = resolve_timezone(config.datetime_kind)
    return CodecOptions(
        tz_aware=True,
        tzinfo=zone,
        uuid_representation=resolve_uuid_representation(config.uuid_representation),
        type_registry=build_type_registry(zone),
    )
