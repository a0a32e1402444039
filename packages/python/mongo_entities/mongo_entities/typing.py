"""Lightweight typing helpers shared by the accessor modules."""

from typing import Any, List, Mapping, Tuple, TypeVar, Union

from pydantic import BaseModel

MongoDocument = Mapping[str, Any]

# Driver-native query document, e.g. ``{"status": "open", "rank": {"$gt": 2}}``.
Predicate = Mapping[str, Any]

# Either an operator document, a plain ``field -> value`` mapping, or a
# partially constructed model whose explicitly set fields are written.
UpdateExpression = Union[Mapping[str, Any], BaseModel]

EntityT = TypeVar("EntityT", bound=BaseModel)

SortKeys = List[Tuple[str, int]]
