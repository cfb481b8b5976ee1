"""MongoDB connection, Beanie document registration and transactions."""
from contextlib import asynccontextmanager
from typing import AsyncIterator

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorClientSession
from pymongo import ReturnDocument

from schooladmin.config import settings
from schooladmin.models import (
    Activity,
    AttendanceRecord,
    AuditLog,
    ClassGroup,
    Counter,
    School,
    Student,
    Truck,
)

DOCUMENT_MODELS = [Student, Activity, School, Truck, ClassGroup, AttendanceRecord, AuditLog, Counter]

_client = None


async def db_startup():
    """Connect to MongoDB and initialize Beanie ODM (creates the unique indexes)."""
    global _client
    _client = AsyncIOMotorClient(settings.mongodb_url)
    await init_beanie(
        database=_client[settings.mongodb_db_name],
        document_models=DOCUMENT_MODELS,
    )


async def db_shutdown():
    """Close MongoDB connection."""
    global _client
    if _client:
        _client.close()
        _client = None


def get_client() -> AsyncIOMotorClient:
    if _client is None:
        raise RuntimeError("Database is not initialised; call db_startup() first")
    return _client


class MongoTransactions:
    """Opens a client session with a started transaction.

    Leaving the block normally commits; any exception, including task
    cancellation, aborts.
    """

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncIOMotorClientSession]:
        async with await get_client().start_session() as session:
            async with session.start_transaction():
                yield session


async def next_sequence(name: str) -> int:
    """Atomically allocate the next integer id for a collection.

    Runs outside any transaction so concurrent writers never conflict on the
    counter document; ids burned by an aborted transaction are not reused.
    """
    doc = await Counter.get_motor_collection().find_one_and_update(
        {"_id": name},
        {"$inc": {"seq": 1}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return int(doc["seq"])
