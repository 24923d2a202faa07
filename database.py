from __future__ import annotations
import logging
from typing import Any, Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

PRODUCT_COLLECTION = "product"
CART_COLLECTION = "cart"


class Settings(BaseSettings):
    DATABASE_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "storefront"
    LOG_LEVEL: str = "INFO"
    PORT: int = 8080
    CORS_ORIGINS: list[str] = ["*"]

settings = Settings()

_client: Optional[AsyncIOMotorClient] = None
_db: Optional[AsyncIOMotorDatabase] = None

async def get_db() -> AsyncIOMotorDatabase:
    global _client, _db
    if _db is None:
        _client = AsyncIOMotorClient(settings.DATABASE_URL)
        _db = _client[settings.DATABASE_NAME]
    return _db

async def ensure_indexes() -> None:
    db = await get_db()
    await db[PRODUCT_COLLECTION].create_index("code", unique=True)
    await db[PRODUCT_COLLECTION].create_index("category")
    await db[PRODUCT_COLLECTION].create_index("price")
    logger.info("Indexes ensured on %s.%s", settings.DATABASE_NAME, PRODUCT_COLLECTION)

def close_db() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
    _client = None
    _db = None

def from_document(doc: dict[str, Any]) -> dict[str, Any]:
    """Swap Mongo's ``_id`` for a string ``id``."""
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc
