"""Product listing pipeline: filter, then sort by price, then paginate.

Shared by the JSON endpoint and the rendered product pages; only the base
path of the navigation links differs between the two.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence
from urllib.parse import urlencode

from schemas import Product

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


def parse_positive_int(raw: Any, default: int) -> int:
    """Non-numeric or non-positive input falls back to ``default``."""
    if raw is None or isinstance(raw, bool):
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return value if value >= 1 else default


def parse_status(raw: Any) -> Optional[bool]:
    if raw is None or isinstance(raw, bool):
        return raw
    value = str(raw).strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return None


def _clean(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


@dataclass(frozen=True)
class ListingQuery:
    query: Optional[str] = None
    category: Optional[str] = None
    status: Optional[bool] = None
    sort: Optional[str] = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_params(
        cls,
        query: Optional[str] = None,
        category: Optional[str] = None,
        status: Any = None,
        sort: Optional[str] = None,
        page: Any = None,
        limit: Any = None,
    ) -> "ListingQuery":
        """Build from raw query-string values."""
        return cls(
            query=_clean(query),
            category=_clean(category),
            status=parse_status(status),
            sort=_clean(sort),
            page=parse_positive_int(page, DEFAULT_PAGE),
            limit=parse_positive_int(limit, DEFAULT_LIMIT),
        )

    @property
    def sort_direction(self) -> Optional[str]:
        if self.sort is None:
            return None
        direction = self.sort.lower()
        return direction if direction in ("asc", "desc") else None

    def link_params(self) -> dict[str, Any]:
        """Active parameters other than ``page``, in a stable order."""
        params: dict[str, Any] = {}
        if self.query is not None:
            params["query"] = self.query
        if self.category is not None:
            params["category"] = self.category
        if self.status is not None:
            params["status"] = "true" if self.status else "false"
        if self.sort is not None:
            params["sort"] = self.sort
        if self.limit != DEFAULT_LIMIT:
            params["limit"] = self.limit
        return params


@dataclass
class ListingResult:
    items: list[Product]
    total_count: int
    total_pages: int
    page: int
    limit: int
    categories: list[str] = field(default_factory=list)
    prev_link: Optional[str] = None
    next_link: Optional[str] = None

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def prev_page(self) -> Optional[int]:
        return self.page - 1 if self.has_prev_page else None

    @property
    def next_page(self) -> Optional[int]:
        return self.page + 1 if self.has_next_page else None

    def to_response(self) -> dict[str, Any]:
        return {
            "status": "success",
            "payload": [p.model_dump() for p in self.items],
            "totalCount": self.total_count,
            "categories": self.categories,
            "totalPages": self.total_pages,
            "prevPage": self.prev_page,
            "nextPage": self.next_page,
            "page": self.page,
            "hasPrevPage": self.has_prev_page,
            "hasNextPage": self.has_next_page,
            "prevLink": self.prev_link,
            "nextLink": self.next_link,
        }


def matches_text(product: Product, text: str) -> bool:
    needle = text.lower()
    return (
        needle in product.title.lower()
        or needle in product.description.lower()
        or needle in product.category.lower()
    )


def filter_products(products: Sequence[Product], params: ListingQuery) -> list[Product]:
    selected = list(products)
    if params.query is not None:
        selected = [p for p in selected if matches_text(p, params.query)]
    if params.category is not None:
        wanted = params.category.lower()
        selected = [p for p in selected if p.category.lower() == wanted]
    if params.status is not None:
        selected = [p for p in selected if p.status is params.status]
    return selected


def sort_products(products: Sequence[Product], direction: Optional[str]) -> list[Product]:
    # sorted() is stable in both directions; equal prices keep their order
    if direction == "asc":
        return sorted(products, key=lambda p: p.price)
    if direction == "desc":
        return sorted(products, key=lambda p: p.price, reverse=True)
    return list(products)


def distinct_categories(products: Sequence[Product]) -> list[str]:
    return sorted({p.category for p in products}, key=str.lower)


def page_link(base_path: str, params: ListingQuery, page: int) -> str:
    query = {**params.link_params(), "page": page}
    return f"{base_path}?{urlencode(query)}"


def run_listing(
    products: Sequence[Product],
    params: ListingQuery,
    base_path: str = "/api/products",
) -> ListingResult:
    selected = sort_products(filter_products(products, params), params.sort_direction)

    total_count = len(selected)
    total_pages = math.ceil(total_count / params.limit)
    start = (params.page - 1) * params.limit
    end = params.page * params.limit

    result = ListingResult(
        items=selected[start:end],
        total_count=total_count,
        total_pages=total_pages,
        page=params.page,
        limit=params.limit,
        categories=distinct_categories(products),
    )
    if result.has_prev_page:
        result.prev_link = page_link(base_path, params, result.page - 1)
    if result.has_next_page:
        result.next_link = page_link(base_path, params, result.page + 1)
    return result
