import pytest
from loguru import logger

from fakes import FakeAsyncDatabase, FakeDatabase
from mongo_entities import AsyncMongoAccessor, MongoAccessor


@pytest.fixture()
def database():
    return FakeDatabase()


@pytest.fixture()
def accessor(database):
    return MongoAccessor(database)


@pytest.fixture()
def async_database():
    return FakeAsyncDatabase()


@pytest.fixture()
def async_accessor(async_database):
    return AsyncMongoAccessor(async_database)


@pytest.fixture()
def log_messages():
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
