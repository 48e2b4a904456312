# marketplace/orders.py
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.deps import Identity, get_current_identity, require_admin
from marketplace.db import get_db
from marketplace.errors import NotFound, store_errors
from marketplace.formatters import format_order
from marketplace.validation import RowId, MAX_INT
from marketplace import crud

router = APIRouter(prefix="/orders", tags=["orders"])

OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]


class OrderItemIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(alias="productId", le=MAX_INT)
    quantity: int = Field(ge=1, le=MAX_INT)

class OrderIn(BaseModel):
    # any client-supplied "status" is ignored; new orders are always pending
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    items: List[OrderItemIn]
    shipping_address: str = Field(min_length=1, alias="shippingAddress")
    payment_method: str = Field(min_length=1, alias="paymentMethod")

class StatusIn(BaseModel):
    status: OrderStatus


@router.get("")
async def list_orders(identity: Identity = Depends(get_current_identity), db: AsyncSession = Depends(get_db)):
    async with store_errors(db, "ORDERS"):
        orders = await crud.get_orders_for_user(db, identity.id)
        return [format_order(o) for o in orders]

@router.get("/{order_id}")
async def get_order(order_id: RowId, identity: Identity = Depends(get_current_identity), db: AsyncSession = Depends(get_db)):
    async with store_errors(db, "ORDERS"):
        order = await crud.get_order_for_user(db, order_id, identity.id)
        if not order:
            raise NotFound("Order not found")
        return format_order(order)

@router.post("", status_code=201)
async def create_order(
    payload: OrderIn,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    items = [{"productId": i.product_id, "quantity": i.quantity} for i in payload.items]
    async with store_errors(db, "ORDERS"):
        order = await crud.create_order(db, identity.id, items, payload.shipping_address, payload.payment_method)
        return format_order(order)

@router.put("/{order_id}/status")
async def update_order_status(
    order_id: RowId,
    payload: StatusIn,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    async with store_errors(db, "ORDERS"):
        order = await crud.update_order_status(db, order_id, payload.status)
        print(f"[ORDERS] order {order_id} -> {payload.status} by admin {identity.id}")
        return format_order(order)
