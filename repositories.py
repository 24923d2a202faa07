"""Store accessors for products and carts.

The abstract classes are what the services depend on. The Mongo
implementations keep one document per product and one per cart; a cart
document holds its line items as ``{product: ObjectId, quantity}``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from database import CART_COLLECTION, PRODUCT_COLLECTION, from_document
from schemas import Cart, CartItem, Product


def _object_id(value: str) -> Optional[ObjectId]:
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ProductRepository(ABC):

    @abstractmethod
    async def get_by_id(self, product_id: str) -> Optional[Product]:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[Product]:
        """Return the product holding ``code``, or None."""

    @abstractmethod
    async def get_many(self, product_ids: Iterable[str]) -> dict[str, Product]:
        """Return the products that exist among ``product_ids``, keyed by ID."""

    @abstractmethod
    async def list_all(self) -> list[Product]:
        """Return every product in insertion order."""

    @abstractmethod
    async def count(self) -> int:
        ...

    @abstractmethod
    async def add(self, data: dict[str, Any]) -> Product:
        """Insert a new product and return it with its assigned ID."""

    @abstractmethod
    async def update(self, product_id: str, changes: dict[str, Any]) -> Optional[Product]:
        """Apply ``changes`` and return the updated product, or None if missing."""

    @abstractmethod
    async def delete(self, product_id: str) -> Optional[Product]:
        """Delete and return the product, or None if missing."""


class CartRepository(ABC):

    @abstractmethod
    async def create(self) -> Cart:
        """Insert an empty cart."""

    @abstractmethod
    async def get_by_id(self, cart_id: str) -> Optional[Cart]:
        ...

    @abstractmethod
    async def save_items(self, cart_id: str, items: list[CartItem]) -> Optional[Cart]:
        """Replace the cart's line items in one write. None if the cart is missing."""


class MongoProductRepository(ProductRepository):

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._collection = db[PRODUCT_COLLECTION]

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        oid = _object_id(product_id)
        if oid is None:
            return None
        doc = await self._collection.find_one({"_id": oid})
        return Product(**from_document(doc)) if doc else None

    async def get_by_code(self, code: str) -> Optional[Product]:
        doc = await self._collection.find_one({"code": code})
        return Product(**from_document(doc)) if doc else None

    async def get_many(self, product_ids: Iterable[str]) -> dict[str, Product]:
        oids = [oid for oid in (_object_id(pid) for pid in product_ids) if oid is not None]
        if not oids:
            return {}
        found = {}
        async for doc in self._collection.find({"_id": {"$in": oids}}):
            product = Product(**from_document(doc))
            found[product.id] = product
        return found

    async def list_all(self) -> list[Product]:
        products = []
        async for doc in self._collection.find({}).sort("_id", 1):
            products.append(Product(**from_document(doc)))
        return products

    async def count(self) -> int:
        return await self._collection.count_documents({})

    async def add(self, data: dict[str, Any]) -> Product:
        now = _now()
        result = await self._collection.insert_one({**data, "created_at": now, "updated_at": now})
        inserted = await self._collection.find_one({"_id": result.inserted_id})
        return Product(**from_document(inserted))

    async def update(self, product_id: str, changes: dict[str, Any]) -> Optional[Product]:
        oid = _object_id(product_id)
        if oid is None:
            return None
        doc = await self._collection.find_one_and_update(
            {"_id": oid},
            {"$set": {**changes, "updated_at": _now()}},
            return_document=ReturnDocument.AFTER,
        )
        return Product(**from_document(doc)) if doc else None

    async def delete(self, product_id: str) -> Optional[Product]:
        oid = _object_id(product_id)
        if oid is None:
            return None
        doc = await self._collection.find_one_and_delete({"_id": oid})
        return Product(**from_document(doc)) if doc else None


def _cart_from_document(doc: dict[str, Any]) -> Cart:
    doc = from_document(doc)
    items = [
        CartItem(product=str(item["product"]), quantity=item["quantity"])
        for item in doc.get("products", [])
    ]
    return Cart(id=doc["id"], products=items)


class MongoCartRepository(CartRepository):

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._collection = db[CART_COLLECTION]

    async def create(self) -> Cart:
        now = _now()
        result = await self._collection.insert_one({"products": [], "created_at": now, "updated_at": now})
        return Cart(id=str(result.inserted_id), products=[])

    async def get_by_id(self, cart_id: str) -> Optional[Cart]:
        oid = _object_id(cart_id)
        if oid is None:
            return None
        doc = await self._collection.find_one({"_id": oid})
        return _cart_from_document(doc) if doc else None

    async def save_items(self, cart_id: str, items: list[CartItem]) -> Optional[Cart]:
        oid = _object_id(cart_id)
        if oid is None:
            return None
        stored = [
            {"product": _object_id(item.product) or item.product, "quantity": item.quantity}
            for item in items
        ]
        doc = await self._collection.find_one_and_update(
            {"_id": oid},
            {"$set": {"products": stored, "updated_at": _now()}},
            return_document=ReturnDocument.AFTER,
        )
        return _cart_from_document(doc) if doc else None
