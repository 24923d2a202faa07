"""Product use cases."""

from __future__ import annotations

import logging

from pymongo.errors import DuplicateKeyError

from errors import InvalidArgument, NotFound
from listing import ListingQuery, ListingResult, run_listing
from repositories import ProductRepository
from schemas import Product, ProductCreate, ProductUpdate
from validation import check_code_available

logger = logging.getLogger(__name__)


class ProductService:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    async def get(self, product_id: str) -> Product:
        product = await self._product_repo.get_by_id(product_id)
        if product is None:
            raise NotFound("Product not found")
        return product

    async def list_products(self, params: ListingQuery, base_path: str = "/api/products") -> ListingResult:
        products = await self._product_repo.list_all()
        return run_listing(products, params, base_path)

    async def create(self, data: ProductCreate) -> Product:
        holder = await self._product_repo.get_by_code(data.code)
        check = check_code_available(data.code, holder)
        if not check.ok:
            raise InvalidArgument(check.error)

        try:
            product = await self._product_repo.add(data.model_dump())
        except DuplicateKeyError:
            # another request took the code between the check and the insert
            raise InvalidArgument(f"Product code '{data.code}' already exists")
        logger.info("Created product %s (code=%s)", product.id, product.code)
        return product

    async def update(self, product_id: str, data: ProductUpdate) -> Product:
        """Partial update; the ID never changes and the code stays unique."""
        await self.get(product_id)

        changes = data.changes()
        if "code" in changes:
            holder = await self._product_repo.get_by_code(changes["code"])
            check = check_code_available(changes["code"], holder, product_id)
            if not check.ok:
                raise InvalidArgument(check.error)

        try:
            product = await self._product_repo.update(product_id, changes)
        except DuplicateKeyError:
            raise InvalidArgument(f"Product code '{changes.get('code')}' already exists")
        if product is None:
            raise NotFound("Product not found")
        return product

    async def seed(self, samples: list[ProductCreate]) -> int:
        """Insert ``samples`` only into an empty catalog."""
        if await self._product_repo.count() > 0:
            return 0
        for sample in samples:
            await self._product_repo.add(sample.model_dump())
        logger.info("Seeded %d products", len(samples))
        return len(samples)

    async def delete(self, product_id: str) -> Product:
        product = await self._product_repo.delete(product_id)
        if product is None:
            raise NotFound("Product not found")
        logger.info("Deleted product %s", product.id)
        return product
