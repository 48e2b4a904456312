# marketplace/formatters.py
from typing import Any, Dict, List, Optional, Union

from .models import User, Product, Order


def split_specialties(value: Optional[str]) -> Union[List[str], str, None]:
    """
    "pottery, weaving ,, glass" -> ["pottery", "weaving", "glass"].
    None and "" are returned as-is so a missing value stays missing.
    """
    if not value:
        return value
    return [piece.strip() for piece in value.split(",") if piece.strip()]


def _ts(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def format_artisan(user: User) -> Dict[str, Any]:
    # whitelist only; password_hash and timestamps never leave the server
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "bio": user.bio,
        "location": user.location,
        "specialties": split_specialties(user.specialties),
        "experience": user.experience,
        "imageUrl": user.image_url,
        "isActive": user.is_active,
    }


def format_user(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "isActive": user.is_active,
    }


def format_product(p: Product) -> Dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "description": p.description,
        # JSON number for clients; Numeric(10, 2) values below 10**8 round-trip through float
        "price": float(p.price) if p.price is not None else None,
        "category": p.category,
        "imageUrl": p.image_url,
        "culturalSignificance": p.cultural_significance,
        "materials": p.materials,
        "stock": p.stock,
        "isActive": p.is_active,
        "artisanId": p.artisan_id,
        "createdAt": _ts(p.created_at),
        "updatedAt": _ts(p.updated_at),
    }


def format_order(o: Order) -> Dict[str, Any]:
    return {
        "id": o.id,
        "userId": o.user_id,
        "items": o.items,
        "shippingAddress": o.shipping_address,
        "paymentMethod": o.payment_method,
        "status": o.status,
        "createdAt": _ts(o.created_at),
        "updatedAt": _ts(o.updated_at),
    }
