"""Cart aggregation: resolve line items against current product records."""

from __future__ import annotations

import logging
from typing import Mapping

from schemas import Cart, CartItem, CartLine, CartProduct, CartView, MissingProduct, Product
from repositories import ProductRepository

logger = logging.getLogger(__name__)


def summarize_product(product: Product) -> CartProduct:
    return CartProduct(
        id=product.id,
        title=product.title,
        description=product.description,
        price=product.price,
        thumbnail=product.thumbnails[0] if product.thumbnails else None,
        code=product.code,
        stock=product.stock,
        category=product.category,
    )


def resolve_line(item: CartItem, products: Mapping[str, Product]) -> CartLine:
    product = products.get(item.product)
    if product is None:
        return CartLine(product=MissingProduct(id=item.product), quantity=item.quantity)
    return CartLine(product=summarize_product(product), quantity=item.quantity)


def cart_total(lines: list[CartLine]) -> float:
    """Unresolved lines add nothing."""
    total = sum(line.product.price * line.quantity for line in lines if line.resolved)
    return round(total, 2)


def build_view(cart: Cart, products: Mapping[str, Product]) -> CartView:
    lines = [resolve_line(item, products) for item in cart.products]
    missing = sum(1 for line in lines if not line.resolved)
    if missing:
        logger.warning("Cart %s references %d missing product(s)", cart.id, missing)
    return CartView(id=cart.id, products=lines, total=cart_total(lines))


async def aggregate_cart(cart: Cart, product_repo: ProductRepository) -> CartView:
    products = await product_repo.get_many({item.product for item in cart.products})
    return build_view(cart, products)
