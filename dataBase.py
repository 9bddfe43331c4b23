import motor.motor_asyncio

import config
from backend_client import BackendClient

client = motor.motor_asyncio.AsyncIOMotorClient(config.MONGO_URL)
db = client[config.DATABASE_NAME]

backend = BackendClient(db)


def get_backend() -> BackendClient:
    return backend
