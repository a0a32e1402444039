"""Round trips against a real MongoDB server.

Set ``MONGO_TEST_URI`` (e.g. ``mongodb://localhost:27017``) to run these.
"""

import asyncio
import os
from uuid import uuid4

import pytest

from mongo_entities import AsyncMongoAccessor, MongoAccessor, MongoSettings
from mongo_entities.mongo import create_async_mongo_client, create_mongo_client
from entity_models import Color, ColorKeyed, Fruit, IntKeyed, Kid, SampleModel, sample, samples

MONGO_TEST_URI = os.getenv("MONGO_TEST_URI")

pytestmark = pytest.mark.skipif(not MONGO_TEST_URI, reason="MONGO_TEST_URI is not set")


@pytest.fixture(params=["standard", "csharp_legacy", "java_legacy", "python_legacy"])
def config(request):
    return MongoSettings(
        uri=MONGO_TEST_URI,
        db_name=f"mongo_entities_test_{uuid4().hex[:12]}",
        uuid_representation=request.param,
    )


@pytest.fixture()
def live_accessor(config):
    client = create_mongo_client(config)
    yield MongoAccessor.from_settings(config, client=client)
    client.drop_database(config.db_name)
    client.close()


def test_live_update_round_trip(live_accessor):
    entity = sample(kid_list=[Kid()])
    live_accessor.insert_one(entity)
    entity.number = 199
    entity.string = uuid4().hex
    assert live_accessor.update(entity) == 1

    assert live_accessor.query(SampleModel).where({"_id": entity.id}).first() == entity


def test_live_update_many_round_trip(live_accessor):
    models = samples(5)
    live_accessor.insert_many(models)
    name = uuid4().hex

    modified = live_accessor.update_many(
        SampleModel,
        {"string": name, "fruit": Fruit.BANANA},
        {"string": {"$in": [model.string for model in models]}},
    )
    assert modified == 5

    for model in models:
        model.string = name
        model.fruit = Fruit.BANANA
    results = live_accessor.query(SampleModel).order_by("number").to_list()
    assert results == models


def test_live_delete(live_accessor):
    live_accessor.insert_many([IntKeyed(Id=1), IntKeyed(Id=2)])
    live_accessor.insert_one(ColorKeyed(id=Color.RED))

    assert live_accessor.delete(IntKeyed(Id=1)) == 1
    assert live_accessor.delete(IntKeyed(Id=1)) == 0
    assert live_accessor.delete(ColorKeyed(id=Color.RED)) == 1
    assert live_accessor.delete_many(IntKeyed, {}) == 1


def test_live_async_round_trip(config):
    async def run():
        client = create_async_mongo_client(config)
        accessor = AsyncMongoAccessor.from_settings(config, client=client)
        try:
            entity = sample()
            await accessor.insert_one(entity)
            entity.string = "changed"
            await accessor.update(entity)
            found = await accessor.query(SampleModel).where({"_id": entity.id}).first()
            deleted = await accessor.delete(entity)
            return entity, found, deleted
        finally:
            await client.drop_database(config.db_name)
            client.close()

    entity, found, deleted = asyncio.run(run())
    assert found == entity
    assert deleted == 1
