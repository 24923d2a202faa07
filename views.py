"""Server-rendered pages built on the same services as the JSON API."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from carts import CartService
from dependencies import get_cart_service, get_product_service
from errors import NotFound
from listing import ListingQuery
from products import ProductService

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

router = APIRouter(default_response_class=HTMLResponse)


def _not_found(request: Request, message: str) -> HTMLResponse:
    return templates.TemplateResponse(
        request, "not_found.html", {"message": message}, status_code=404
    )


@router.get("/")
@router.get("/products")
async def products_page(
    request: Request,
    query: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    service: ProductService = Depends(get_product_service),
):
    params = ListingQuery.from_params(query, category, status, sort, page, limit)
    result = await service.list_products(params, base_path="/products")
    return templates.TemplateResponse(request, "products.html", {
        "result": result,
        "params": params,
    })


@router.get("/products/{pid}")
async def product_page(
    request: Request,
    pid: str,
    service: ProductService = Depends(get_product_service),
):
    try:
        product = await service.get(pid)
    except NotFound as e:
        return _not_found(request, e.message)
    return templates.TemplateResponse(request, "product.html", {"product": product})


@router.get("/carts/{cid}")
async def cart_page(
    request: Request,
    cid: str,
    service: CartService = Depends(get_cart_service),
):
    try:
        cart = await service.get(cid)
    except NotFound as e:
        return _not_found(request, e.message)
    return templates.TemplateResponse(request, "cart.html", {"cart": cart})


@router.get("/chat")
async def chat_page(request: Request):
    return templates.TemplateResponse(request, "chat.html", {})
