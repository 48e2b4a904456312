# marketplace/products.py
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field, HttpUrl
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.deps import Identity, get_current_identity
from marketplace.db import get_db
from marketplace.errors import NotFound, store_errors
from marketplace.formatters import format_product
from marketplace.validation import PatchIn, RowId, MAX_INT, MAX_PRICE
from marketplace import crud

router = APIRouter(prefix="/products", tags=["products"])


class ProductIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: float = Field(ge=0, lt=MAX_PRICE, allow_inf_nan=False)
    category: str = Field(min_length=1)
    image_url: HttpUrl = Field(alias="imageUrl")
    cultural_significance: Optional[str] = Field(default=None, alias="culturalSignificance")
    materials: Optional[str] = None
    stock: int = Field(ge=0, le=MAX_INT)

    def to_row(self) -> dict:
        data = self.model_dump()
        data["image_url"] = str(self.image_url)
        return data

class ProductUpdateIn(PatchIn):
    not_null = ("name", "description", "price", "category", "image_url", "stock", "is_active")

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=0, lt=MAX_PRICE, allow_inf_nan=False)
    category: Optional[str] = Field(default=None, min_length=1)
    image_url: Optional[HttpUrl] = Field(default=None, alias="imageUrl")
    cultural_significance: Optional[str] = Field(default=None, alias="culturalSignificance")
    materials: Optional[str] = None
    stock: Optional[int] = Field(default=None, ge=0, le=MAX_INT)
    is_active: Optional[bool] = Field(default=None, alias="isActive")


@router.get("")
async def list_products(
    category: Optional[str] = Query(None),
    artisan_id: Optional[str] = Query(None, alias="artisanId"),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    async with store_errors(db, "PRODUCTS"):
        print(f"[PRODUCTS] list filters category={category!r} artisanId={artisan_id!r} search={search!r}")
        products = await crud.list_products(db, category=category, artisan_id=artisan_id, search=search)
        print(f"[PRODUCTS] found {len(products)} products")
        return [format_product(p) for p in products]

@router.get("/{product_id}")
async def get_product(product_id: RowId, db: AsyncSession = Depends(get_db)):
    async with store_errors(db, "PRODUCTS"):
        product = await crud.get_active_product(db, product_id)
        if not product:
            raise NotFound("Product not found")
        return format_product(product)

@router.post("", status_code=201)
async def create_product(
    payload: ProductIn,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    async with store_errors(db, "PRODUCTS"):
        product = await crud.create_product(db, identity.id, payload.to_row())
        print(f"[PRODUCTS] created product {product.id} for artisan {identity.id}")
        return format_product(product)

@router.put("/{product_id}")
async def update_product(
    product_id: RowId,
    payload: ProductUpdateIn,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    async with store_errors(db, "PRODUCTS"):
        product = await crud.update_product(db, product_id, identity.id, payload.to_patch())
        print(f"[PRODUCTS] updated product {product_id}")
        return format_product(product)

@router.delete("/{product_id}")
async def delete_product(
    product_id: RowId,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    async with store_errors(db, "PRODUCTS"):
        await crud.delete_product(db, product_id, identity.id)
        print(f"[PRODUCTS] deleted product {product_id}")
        return {"message": "Product deleted successfully"}
