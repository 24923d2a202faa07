from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

import realtime
import views
from carts import CartService
from database import close_db, ensure_indexes, get_db, settings
from dependencies import get_cart_service, get_product_service
from errors import DomainError, Internal
from listing import ListingQuery
from products import ProductService
from schemas import CartReplace, ProductCreate, ProductUpdate, QuantityUpdate

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await ensure_indexes()
    yield
    close_db()


app = FastAPI(title="Storefront API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(views.router)
app.include_router(realtime.router)

# Error translation

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})

@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return error_response(exc.status_code, exc.message)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"][1:]) or "body"
        problems.append(f"{field}: {err['msg']}")
    return error_response(400, "; ".join(problems))

@app.exception_handler(PyMongoError)
async def storage_error_handler(request: Request, exc: PyMongoError):
    logger.exception("Storage failure on %s %s", request.method, request.url.path)
    return error_response(Internal.status_code, "Internal server error")

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = "Route not found" if exc.status_code == 404 else str(exc.detail)
    return error_response(exc.status_code, message)

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error")

# Seed data

SEED_PRODUCTS: list[dict] = [
    {"title": "Classic Cotton Shirt", "description": "Slim fit shirt in breathable cotton", "code": "SHIRT-001", "price": 29.99, "stock": 40, "category": "Clothing", "thumbnails": ["/img/shirt-001.jpg"]},
    {"title": "Linen Summer Shirt", "description": "Loose linen Shirt for warm days", "code": "SHIRT-002", "price": 39.5, "stock": 25, "category": "Clothing", "thumbnails": []},
    {"title": "Denim Jacket", "description": "Washed denim with brass buttons", "code": "JACKET-001", "price": 89.0, "stock": 12, "category": "Clothing", "thumbnails": ["/img/jacket-001.jpg"]},
    {"title": "Running Sneakers", "description": "Lightweight trainers with foam sole", "code": "SHOE-001", "price": 74.9, "stock": 30, "category": "Footwear", "thumbnails": []},
    {"title": "Leather Boots", "description": "Waterproof ankle boots", "code": "SHOE-002", "price": 129.0, "stock": 0, "category": "Footwear", "status": False, "thumbnails": []},
    {"title": "Canvas Tote", "description": "Everyday bag in heavy canvas", "code": "BAG-001", "price": 19.0, "stock": 60, "category": "Accessories", "thumbnails": []},
    {"title": "Wool Beanie", "description": "Ribbed merino beanie", "code": "HAT-001", "price": 15.5, "stock": 45, "category": "Accessories", "thumbnails": []},
    {"title": "Steel Water Bottle", "description": "Insulated bottle, keeps drinks cold for 24h", "code": "HOME-001", "price": 24.0, "stock": 80, "category": "Home", "thumbnails": []},
    {"title": "Ceramic Mug", "description": "Hand-glazed mug, 350ml", "code": "HOME-002", "price": 12.0, "stock": 0, "category": "Home", "status": False, "thumbnails": []},
    {"title": "Cotton Socks (3 pack)", "description": "Soft socks, one size", "code": "SOCK-001", "price": 9.99, "stock": 100, "category": "Clothing", "thumbnails": []},
    {"title": "Sunglasses", "description": "Polarized lenses in acetate frame", "code": "ACC-002", "price": 59.0, "stock": 20, "category": "Accessories", "thumbnails": []},
]

class SeedResponse(BaseModel):
    inserted: int

@app.post("/seed", response_model=SeedResponse)
async def seed_products(service: ProductService = Depends(get_product_service)):
    # Insert only if products collection is empty
    inserted = await service.seed([ProductCreate(**p) for p in SEED_PRODUCTS])
    return SeedResponse(inserted=inserted)

@app.get("/api")
async def index():
    return {
        "success": True,
        "message": "Products and carts API",
        "endpoints": {
            "products": {
                "GET /api/products": "List products (query, category, status, sort, page, limit)",
                "GET /api/products/{pid}": "Get product by ID",
                "POST /api/products": "Create product",
                "PUT /api/products/{pid}": "Update product",
                "DELETE /api/products/{pid}": "Delete product",
            },
            "carts": {
                "POST /api/carts": "Create cart",
                "GET /api/carts/{cid}": "Get cart by ID with product details",
                "PUT /api/carts/{cid}": "Replace all cart products",
                "DELETE /api/carts/{cid}": "Empty cart",
                "POST /api/carts/{cid}/product/{pid}": "Add product to cart",
                "PUT /api/carts/{cid}/product/{pid}": "Update product quantity",
                "DELETE /api/carts/{cid}/product/{pid}": "Remove product from cart",
            },
            "realtime": {"WS /ws": "Ping and chat channel"},
        },
    }

@app.get("/test")
async def test():
    db = await get_db()
    colls: list[str] = []
    connected = True
    try:
        colls = await db.list_collection_names()
    except PyMongoError as e:
        logger.warning("Database check failed: %s", e)
        connected = False
    return {
        "backend": "Running",
        "database": "Available" if connected else "Not Available",
        "database_name": db.name,
        "connection_status": "Connected" if connected else "Not Connected",
        "collections": colls,
    }

# Products

@app.get("/api/products")
async def list_products(
    query: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    service: ProductService = Depends(get_product_service),
):
    params = ListingQuery.from_params(query, category, status, sort, page, limit)
    result = await service.list_products(params)
    return result.to_response()

@app.get("/api/products/{pid}")
async def get_product(pid: str, service: ProductService = Depends(get_product_service)):
    product = await service.get(pid)
    return {"success": True, "data": product.model_dump()}

@app.post("/api/products", status_code=201)
async def create_product(payload: ProductCreate, service: ProductService = Depends(get_product_service)):
    product = await service.create(payload)
    return {"success": True, "message": "Product created", "data": product.model_dump()}

@app.put("/api/products/{pid}")
async def update_product(pid: str, payload: ProductUpdate, service: ProductService = Depends(get_product_service)):
    product = await service.update(pid, payload)
    return {"success": True, "message": "Product updated", "data": product.model_dump()}

@app.delete("/api/products/{pid}")
async def delete_product(pid: str, service: ProductService = Depends(get_product_service)):
    product = await service.delete(pid)
    return {"success": True, "message": "Product deleted", "data": product.model_dump()}

# Carts

@app.post("/api/carts", status_code=201)
async def create_cart(service: CartService = Depends(get_cart_service)):
    cart = await service.create()
    return {"success": True, "message": "Cart created", "data": cart.model_dump()}

@app.get("/api/carts/{cid}")
async def get_cart(cid: str, service: CartService = Depends(get_cart_service)):
    cart = await service.get(cid)
    return {"success": True, "data": cart.model_dump()}

@app.put("/api/carts/{cid}")
async def replace_cart_products(cid: str, payload: CartReplace, service: CartService = Depends(get_cart_service)):
    cart = await service.replace_products(cid, payload.products)
    return {"success": True, "message": "Cart products replaced", "data": cart.model_dump()}

@app.delete("/api/carts/{cid}")
async def clear_cart(cid: str, service: CartService = Depends(get_cart_service)):
    cart = await service.clear(cid)
    return {"success": True, "message": "Cart emptied", "data": cart.model_dump()}

@app.post("/api/carts/{cid}/product/{pid}")
async def add_product_to_cart(cid: str, pid: str, service: CartService = Depends(get_cart_service)):
    cart = await service.add_product(cid, pid)
    return {"success": True, "message": "Product added to cart", "data": cart.model_dump()}

@app.put("/api/carts/{cid}/product/{pid}")
async def update_cart_quantity(cid: str, pid: str, payload: QuantityUpdate, service: CartService = Depends(get_cart_service)):
    cart = await service.update_quantity(cid, pid, payload.quantity)
    return {"success": True, "message": "Quantity updated", "data": cart.model_dump()}

@app.delete("/api/carts/{cid}/product/{pid}")
async def remove_product_from_cart(cid: str, pid: str, service: CartService = Depends(get_cart_service)):
    cart = await service.remove_product(cid, pid)
    return {"success": True, "message": "Product removed from cart", "data": cart.model_dump()}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
