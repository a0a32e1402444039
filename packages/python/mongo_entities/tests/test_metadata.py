from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import BaseModel

from mongo_entities import (
    ConfigurationError,
    collection,
    resolve_collection_name,
    resolve_identifier_field,
)
from entity_models import AliasKeyed, IntKeyed, MarkedKeyed, NoKey, NotAModel, SampleModel


def test_collection_name_defaults_to_class_name():
    assert resolve_collection_name(SampleModel) == "SampleModel"


def test_collection_name_uses_decorator():
    assert resolve_collection_name(IntKeyed) == "int_keyed"


def test_collection_name_uses_class_attribute():
    class Invoice(BaseModel):
        __collection__ = "invoices"
        id: int

    assert resolve_collection_name(Invoice) == "invoices"


def test_collection_name_is_not_inherited():
    class Child(IntKeyed):
        pass

    assert resolve_collection_name(Child) == "Child"


def test_collection_decorator_rejects_empty_name():
    with pytest.raises(ConfigurationError):
        collection("")


def test_identifier_falls_back_to_id_name():
    field = resolve_identifier_field(SampleModel)
    assert field.name == "id"
    assert field.dump_key == "id"
    assert field.load_key == "id"


def test_identifier_capitalized_id_wins_over_lowercase():
    class Both(BaseModel):
        id: int
        Id: int

    assert resolve_identifier_field(Both).name == "Id"
    assert resolve_identifier_field(IntKeyed).name == "Id"


def test_identifier_marker_wins_over_name_fallback():
    field = resolve_identifier_field(MarkedKeyed)
    assert field.name == "serial"
    assert field.annotation is int


def test_identifier_alias_counts_as_marker():
    field = resolve_identifier_field(AliasKeyed)
    assert field.name == "code"
    assert field.dump_key == "_id"
    assert field.load_key == "_id"


def test_missing_identifier_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="NoKey"):
        resolve_identifier_field(NoKey)
    # failures are not cached
    with pytest.raises(ConfigurationError):
        resolve_identifier_field(NoKey)


def test_non_model_types_are_rejected():
    with pytest.raises(ConfigurationError):
        resolve_identifier_field(NotAModel)


def test_resolution_is_computed_once_per_type():
    class Fresh(BaseModel):
        id: str

    resolve_identifier_field.cache_clear()
    resolve_collection_name.cache_clear()

    first = resolve_identifier_field(Fresh)
    assert resolve_identifier_field(Fresh) is first
    assert resolve_identifier_field(Fresh) is first
    info = resolve_identifier_field.cache_info()
    assert (info.misses, info.hits) == (1, 2)

    assert resolve_collection_name(Fresh) == resolve_collection_name(Fresh) == "Fresh"
    info = resolve_collection_name.cache_info()
    assert (info.misses, info.hits) == (1, 1)


def test_concurrent_resolution_is_consistent():
    class Shared(BaseModel):
        id: int

    with ThreadPoolExecutor(max_workers=8) as pool:
        fields = list(pool.map(lambda _: resolve_identifier_field(Shared), range(64)))
        names = list(pool.map(lambda _: resolve_collection_name(Shared), range(64)))

    assert {field.name for field in fields} == {"id"}
    assert len(set(fields)) == 1
    assert set(names) == {"Shared"}
