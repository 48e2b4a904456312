# marketplace/artisans.py
from fastapi import APIRouter, Depends
from pydantic import EmailStr, Field, HttpUrl, field_validator
from typing import List, Optional, Union
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.deps import Identity, get_current_identity
from marketplace.db import get_db
from marketplace.errors import NotFound, Forbidden, store_errors
from marketplace.formatters import format_artisan, format_product
from marketplace.validation import PatchIn, RowId, normalize_email
from marketplace import crud

router = APIRouter(prefix="/artisans", tags=["artisans"])


class ArtisanUpdateIn(PatchIn):
    not_null = ("name", "email", "is_active")

    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    # "a, b" or ["a", "b"]; stored comma-delimited either way
    specialties: Optional[Union[str, List[str]]] = None
    experience: Optional[str] = None
    image_url: Optional[HttpUrl] = Field(default=None, alias="imageUrl")
    is_active: Optional[bool] = Field(default=None, alias="isActive")

    @field_validator("email", mode="before")
    @classmethod
    def _normalize(cls, v):
        return normalize_email(v) if isinstance(v, str) else v

    @field_validator("specialties")
    @classmethod
    def _join(cls, v):
        if isinstance(v, list):
            if any("," in s for s in v):
                raise ValueError("specialties items cannot contain commas")
            return ", ".join(s for s in v if s)
        return v


@router.get("")
async def list_artisans(db: AsyncSession = Depends(get_db)):
    async with store_errors(db, "ARTISANS"):
        artisans = await crud.list_artisans(db)
        return [format_artisan(a) for a in artisans]

@router.get("/{artisan_id}")
async def get_artisan(artisan_id: RowId, db: AsyncSession = Depends(get_db)):
    async with store_errors(db, "ARTISANS"):
        artisan = await crud.get_active_artisan(db, artisan_id)
        if not artisan:
            raise NotFound("Artisan not found")
        return format_artisan(artisan)

@router.get("/{artisan_id}/products")
async def list_artisan_products(artisan_id: RowId, db: AsyncSession = Depends(get_db)):
    async with store_errors(db, "ARTISANS"):
        products = await crud.list_products(db, artisan_id=artisan_id)
        return [format_product(p) for p in products]

async def require_profile_owner(
    artisan_id: RowId,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> Identity:
    # resolved before the body is validated: a non-owner gets 403 whatever they send
    artisan = await crud.get_artisan(db, artisan_id)
    if not artisan:
        raise NotFound("Artisan not found")
    if artisan.id != identity.id:
        raise Forbidden("Not authorized to update this profile")
    return identity

@router.put("/{artisan_id}")
async def update_artisan(
    artisan_id: RowId,
    payload: ArtisanUpdateIn,
    identity: Identity = Depends(require_profile_owner),
    db: AsyncSession = Depends(get_db),
):
    async with store_errors(db, "ARTISANS"):
        artisan = await crud.update_artisan(db, artisan_id, identity.id, payload.to_patch())
        print(f"[ARTISANS] profile {artisan_id} updated by {identity.id}")
        return format_artisan(artisan)
