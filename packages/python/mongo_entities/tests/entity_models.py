from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Annotated, List, Optional
from uuid import UUID, uuid4

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

from mongo_entities import MongoId, collection


class Fruit(IntEnum):
    APPLE = 0
    BANANA = 1
    PEAR = 2


class Color(Enum):
    RED = "red"
    BLUE = "blue"


class Kid(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    born: datetime = Field(default_factory=lambda: datetime(2020, 1, 1, tzinfo=timezone.utc))


class SampleModel(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    number: int = 0
    string: str = ""
    moment: datetime = Field(
        default_factory=lambda: datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    )
    price: Decimal = Decimal("0")
    fruit: Fruit = Fruit.APPLE
    kid_list: List[Kid] = Field(default_factory=list)


@collection("int_keyed")
class IntKeyed(BaseModel):
    Id: int
    label: str = ""


class AliasKeyed(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str = Field(alias="_id")
    title: str = ""


class MarkedKeyed(BaseModel):
    name: str
    serial: Annotated[int, MongoId()]
    id: int = 0


class ColorKeyed(BaseModel):
    id: Color
    note: str = ""


class AutoKeyed(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: Optional[ObjectId] = None
    body: str = ""


class StrKeyed(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    id: Optional[str] = None
    body: str = ""


class SerialKeyed(BaseModel):
    id: Optional[int] = None
    body: str = ""


class Dated(BaseModel):
    id: int
    day: date


class NoKey(BaseModel):
    name: str


class NotAModel:
    id = 1


def sample(**overrides) -> SampleModel:
    return SampleModel(**{"string": uuid4().hex, "number": 1, "price": Decimal("9.99"), **overrides})


def samples(count: int) -> List[SampleModel]:
    return [sample(number=index) for index in range(count)]
