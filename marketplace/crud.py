# marketplace/crud.py
from sqlalchemy import select, update, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from .models import User, Product, Order, ROLE_ARTISAN, ROLE_CUSTOMER
from .errors import ValidationError, Forbidden, NotFound
from .validation import MAX_INT
from typing import Any, Dict, List, Optional, Union
from passlib.context import CryptContext


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


async def _refetch(db: AsyncSession, model, pk: int):
    # populate_existing: rows changed by UPDATE ... WHERE must not come back stale from the identity map
    q = select(model).where(model.id == pk).execution_options(populate_existing=True)
    r = await db.execute(q)
    return r.scalar_one_or_none()


# ---------- filters ----------
def build_artisan_filters() -> list:
    return [User.role == ROLE_ARTISAN, User.is_active.is_(True)]

def build_product_filters(
    category: Optional[str] = None,
    artisan_id: Union[str, int, None] = None,
    search: Optional[str] = None,
) -> list:
    """
    Translate optional listing params into WHERE clauses (AND-ed by the caller).
    Empty strings count as absent. `search` is a case-sensitive substring
    match on name OR description.
    """
    clauses = [Product.is_active.is_(True)]
    if category:
        clauses.append(Product.category == category)
    if artisan_id not in (None, ""):
        try:
            artisan_id = int(artisan_id)
        except (TypeError, ValueError):
            raise ValidationError("artisanId must be an integer")
        if not -MAX_INT - 1 <= artisan_id <= MAX_INT:
            raise ValidationError("artisanId is out of range")
        clauses.append(Product.artisan_id == artisan_id)
    if search:
        clauses.append(or_(
            Product.name.contains(search, autoescape=True),
            Product.description.contains(search, autoescape=True),
        ))
    return clauses


# ---------- users / artisans ----------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)

async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    q = select(User).where(User.email == email)
    r = await db.execute(q)
    return r.scalar_one_or_none()

async def get_user_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
    q = select(User).where(User.id == user_id)
    r = await db.execute(q)
    return r.scalar_one_or_none()

async def create_user(db: AsyncSession, name: str, email: str, password: str, role: str = ROLE_CUSTOMER) -> User:
    user = User(name=name, email=email, password_hash=hash_password(password), role=role, is_active=True)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user

async def list_artisans(db: AsyncSession) -> List[User]:
    # no ORDER BY: store-default order
    q = select(User).where(*build_artisan_filters())
    r = await db.execute(q)
    return r.scalars().all()

async def get_active_artisan(db: AsyncSession, artisan_id: int) -> Optional[User]:
    q = select(User).where(User.id == artisan_id, *build_artisan_filters())
    r = await db.execute(q)
    return r.scalar_one_or_none()

async def get_artisan(db: AsyncSession, artisan_id: int) -> Optional[User]:
    """Artisan by id regardless of is_active (used by the owner's own updates)."""
    q = select(User).where(User.id == artisan_id, User.role == ROLE_ARTISAN)
    r = await db.execute(q)
    return r.scalar_one_or_none()

async def update_artisan(db: AsyncSession, artisan_id: int, requester_id: int, patch: Dict[str, Any]) -> User:
    artisan = await get_artisan(db, artisan_id)
    if not artisan:
        raise NotFound("Artisan not found")
    if artisan.id != requester_id:
        raise Forbidden("Not authorized to update this profile")

    if patch:
        stmt = (
            update(User)
            .where(User.id == artisan_id, User.role == ROLE_ARTISAN)
            .values(**patch)
        )
        r = await db.execute(stmt)
        if r.rowcount == 0:
            # role changed between the read and the write
            await db.rollback()
            raise NotFound("Artisan not found")
        await db.commit()
    return await _refetch(db, User, artisan_id)


# ---------- products ----------
async def list_products(db: AsyncSession, category=None, artisan_id=None, search=None) -> List[Product]:
    q = select(Product).where(*build_product_filters(category, artisan_id, search))
    r = await db.execute(q)
    return r.scalars().all()

async def get_active_product(db: AsyncSession, product_id: int) -> Optional[Product]:
    q = select(Product).where(Product.id == product_id, Product.is_active.is_(True))
    r = await db.execute(q)
    return r.scalar_one_or_none()

async def get_product(db: AsyncSession, product_id: int) -> Optional[Product]:
    q = select(Product).where(Product.id == product_id)
    r = await db.execute(q)
    return r.scalar_one_or_none()

async def create_product(db: AsyncSession, artisan_id: int, data: Dict[str, Any]) -> Product:
    product = Product(**data, artisan_id=artisan_id)
    db.add(product)
    await db.commit()
    await db.refresh(product)
    return product

async def _ownership_failure(db: AsyncSession, product_id: int, action: str) -> Exception:
    if await get_product(db, product_id) is None:
        return NotFound("Product not found")
    return Forbidden(f"Not authorized to {action} this product")

async def update_product(db: AsyncSession, product_id: int, requester_id: int, patch: Dict[str, Any]) -> Product:
    """
    Conditional write: UPDATE ... WHERE id = :id AND artisan_id = :requester.
    Zero rows touched means the product is gone or owned by someone else.
    """
    if not patch:
        product = await get_product(db, product_id)
        if product is None or product.artisan_id != requester_id:
            raise await _ownership_failure(db, product_id, "update")
        return product

    stmt = (
        update(Product)
        .where(Product.id == product_id, Product.artisan_id == requester_id)
        .values(**patch)
    )
    r = await db.execute(stmt)
    if r.rowcount == 0:
        await db.rollback()
        raise await _ownership_failure(db, product_id, "update")
    await db.commit()
    return await _refetch(db, Product, product_id)

async def delete_product(db: AsyncSession, product_id: int, requester_id: int) -> None:
    stmt = delete(Product).where(Product.id == product_id, Product.artisan_id == requester_id)
    r = await db.execute(stmt)
    if r.rowcount == 0:
        await db.rollback()
        raise await _ownership_failure(db, product_id, "delete")
    await db.commit()


# ---------- orders ----------
async def get_orders_for_user(db: AsyncSession, user_id: int) -> List[Order]:
    q = select(Order).where(Order.user_id == user_id).order_by(Order.id.desc())
    r = await db.execute(q)
    return r.scalars().all()

async def get_order_for_user(db: AsyncSession, order_id: int, user_id: int) -> Optional[Order]:
    q = select(Order).where(Order.id == order_id, Order.user_id == user_id)
    r = await db.execute(q)
    return r.scalar_one_or_none()

async def get_order_by_id(db: AsyncSession, order_id: int) -> Optional[Order]:
    q = select(Order).where(Order.id == order_id)
    r = await db.execute(q)
    return r.scalar_one_or_none()

async def create_order(db: AsyncSession, user_id: int, items: List[Dict], shipping_address: str, payment_method: str) -> Order:
    order = Order(
        user_id=user_id,
        items=items,
        shipping_address=shipping_address,
        payment_method=payment_method,
        status="pending",
    )
    db.add(order)
    await db.commit()
    await db.refresh(order)
    print(f"[CRUD] create_order created order {order.id} for user {user_id}")
    return order

async def update_order_status(db: AsyncSession, order_id: int, status: str) -> Order:
    r = await db.execute(update(Order).where(Order.id == order_id).values(status=status))
    if r.rowcount == 0:
        await db.rollback()
        raise NotFound("Order not found")
    await db.commit()
    return await _refetch(db, Order, order_id)
