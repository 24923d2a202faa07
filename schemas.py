from __future__ import annotations
from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field

# Each stored class => one collection, lowercased name

class ProductCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    code: str = Field(min_length=1)
    price: float = Field(ge=0)
    stock: int = Field(ge=0)
    category: str = Field(min_length=1)
    status: bool = True
    thumbnails: list[str] = Field(default_factory=list)

class ProductUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    code: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = Field(default=None, min_length=1)
    status: Optional[bool] = None
    thumbnails: Optional[list[str]] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)

class Product(ProductCreate):
    id: str

class CartItem(BaseModel):
    product: str
    quantity: int = Field(ge=1, default=1)

class Cart(BaseModel):
    id: str
    products: list[CartItem] = Field(default_factory=list)

# Request bodies. Quantities stay unconstrained here so the cart service
# reports them with its own message.

class CartItemIn(BaseModel):
    product: str
    quantity: int

class CartReplace(BaseModel):
    products: list[CartItemIn]

class QuantityUpdate(BaseModel):
    quantity: int

# Aggregated cart view

class CartProduct(BaseModel):
    id: str
    title: str
    description: str
    price: float
    thumbnail: Optional[str] = None
    code: str
    stock: int
    category: str

class MissingProduct(BaseModel):
    id: str
    error: str = "not found"

class CartLine(BaseModel):
    product: Union[CartProduct, MissingProduct]
    quantity: int

    @property
    def resolved(self) -> bool:
        return isinstance(self.product, CartProduct)

class CartView(BaseModel):
    id: str
    products: list[CartLine]
    total: float
