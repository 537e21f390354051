from contextlib import asynccontextmanager

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient

from config.env import MONGO_DB_NAME


class Store:
    """
    Process-wide storage handle.

    Built once at startup and shared by every request through
    ``app.state.store``. Holds the motor client (and its connection pool)
    plus the database the API works against.
    """

    def __init__(self, client, db):
        self.client = client
        self.db = db

    @asynccontextmanager
    async def transaction(self):
        """
        Multi-document transaction. Commits when the block exits normally,
        aborts when it raises. Requires a replica set deployment.
        """
        async with await self.client.start_session() as session:
            async with session.start_transaction():
                yield session

    def close(self):
        self.client.close()


def create_store(uri: str) -> Store:
    if not uri:
        raise RuntimeError("MONGODB_URI not set")

    client = AsyncIOMotorClient(uri)
    db = client.get_default_database(default=MONGO_DB_NAME)
    return Store(client, db)


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_db(request: Request):
    return request.app.state.store.db
