"""FastAPI dependency providers.

Tests swap the two repository providers through ``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Depends

from carts import CartService
from database import get_db
from products import ProductService
from repositories import CartRepository, MongoCartRepository, MongoProductRepository, ProductRepository


async def get_product_repository() -> ProductRepository:
    return MongoProductRepository(await get_db())


async def get_cart_repository() -> CartRepository:
    return MongoCartRepository(await get_db())


def get_product_service(
    product_repo: ProductRepository = Depends(get_product_repository),
) -> ProductService:
    return ProductService(product_repo)


def get_cart_service(
    cart_repo: CartRepository = Depends(get_cart_repository),
    product_repo: ProductRepository = Depends(get_product_repository),
) -> CartService:
    return CartService(cart_repo, product_repo)
