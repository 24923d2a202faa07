"""Cart use cases.

Every mutation is a read-modify-write of the whole line-item list followed by
a single save; the returned value is always the re-resolved cart view.
"""

from __future__ import annotations

import logging

from aggregation import aggregate_cart
from errors import InvalidArgument, NotFound
from repositories import CartRepository, ProductRepository
from schemas import Cart, CartItem, CartItemIn, CartView
from validation import check_quantity

logger = logging.getLogger(__name__)


class CartService:

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository) -> None:
        self._cart_repo = cart_repo
        self._product_repo = product_repo

    async def _load(self, cart_id: str) -> Cart:
        cart = await self._cart_repo.get_by_id(cart_id)
        if cart is None:
            raise NotFound("Cart not found")
        return cart

    async def _save(self, cart_id: str, items: list[CartItem]) -> CartView:
        cart = await self._cart_repo.save_items(cart_id, items)
        if cart is None:
            raise NotFound("Cart not found")
        return await aggregate_cart(cart, self._product_repo)

    async def create(self) -> Cart:
        cart = await self._cart_repo.create()
        logger.info("Created cart %s", cart.id)
        return cart

    async def get(self, cart_id: str) -> CartView:
        cart = await self._load(cart_id)
        return await aggregate_cart(cart, self._product_repo)

    async def add_product(self, cart_id: str, product_id: str) -> CartView:
        cart = await self._load(cart_id)
        if await self._product_repo.get_by_id(product_id) is None:
            raise NotFound("Product not found")

        items = list(cart.products)
        for index, item in enumerate(items):
            if item.product == product_id:
                items[index] = CartItem(product=product_id, quantity=item.quantity + 1)
                break
        else:
            items.append(CartItem(product=product_id, quantity=1))
        return await self._save(cart_id, items)

    async def update_quantity(self, cart_id: str, product_id: str, quantity: int) -> CartView:
        check = check_quantity(quantity)
        if not check.ok:
            raise InvalidArgument(check.error)

        cart = await self._load(cart_id)
        if not any(item.product == product_id for item in cart.products):
            raise NotFound("Product not found in cart")
        items = [
            CartItem(product=item.product, quantity=quantity) if item.product == product_id else item
            for item in cart.products
        ]
        return await self._save(cart_id, items)

    async def remove_product(self, cart_id: str, product_id: str) -> CartView:
        cart = await self._load(cart_id)
        items = [item for item in cart.products if item.product != product_id]
        if len(items) == len(cart.products):
            raise NotFound("Product not found in cart")
        return await self._save(cart_id, items)

    async def replace_products(self, cart_id: str, entries: list[CartItemIn]) -> CartView:
        """Validate every entry before touching the cart.

        Entries naming the same product are merged by summing quantities.
        """
        await self._load(cart_id)

        merged: dict[str, int] = {}
        for position, entry in enumerate(entries):
            check = check_quantity(entry.quantity)
            if not check.ok:
                raise InvalidArgument(f"Entry {position}: {check.error}")
            if await self._product_repo.get_by_id(entry.product) is None:
                raise NotFound(f"Entry {position}: product {entry.product} not found")
            merged[entry.product] = merged.get(entry.product, 0) + entry.quantity

        items = [CartItem(product=pid, quantity=qty) for pid, qty in merged.items()]
        return await self._save(cart_id, items)

    async def clear(self, cart_id: str) -> CartView:
        await self._load(cart_id)
        return await self._save(cart_id, [])
