# storefront/db/cart_functions.py
import asyncio
import enum
import logging
import weakref
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from storefront.auth import CurrentUser
from storefront.db.models import Cart, CartItem, Product, utcnow
from storefront.db.validation import INT32_MAX, validate_cart_item, validate_cart_items
from storefront.errors import Forbidden, InvalidInput, NotFound, store_operation

logger = logging.getLogger(__name__)


class CartOutcome(str, enum.Enum):
    CREATED = "created"
    UPDATED = "updated"


@dataclass
class CartMutation:
    outcome: CartOutcome
    cart: Cart


class CartLocks:
    """One asyncio.Lock per user; a lock lives only while someone holds or awaits it."""

    def __init__(self):
        self._locks = weakref.WeakValueDictionary()

    def __call__(self, user_id: int) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock


cart_locks = CartLocks()


# Cart of the user with its items; user, products and categories are resolved when populate is set
async def get_cart_by_user_id(db: AsyncSession, user_id: int, populate: bool = False) -> Optional[Cart]:
    if populate:
        options = (
            selectinload(Cart.user),
            selectinload(Cart.items).selectinload(CartItem.product).selectinload(Product.category),
        )
    else:
        options = (selectinload(Cart.items),)
    query = select(Cart).filter(Cart.user_id == user_id).options(*options).execution_options(populate_existing=True)
    async with store_operation(db, "fetch cart"):
        result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_cart(db: AsyncSession, user_id: int) -> Optional[Cart]:
    """Fully populated cart, or None when the user never added anything."""
    return await get_cart_by_user_id(db, user_id, populate=True)


def find_item(cart: Cart, product_id: int) -> Optional[CartItem]:
    return next((item for item in cart.items if item.product_id == product_id), None)


async def has_product(db: AsyncSession, user_id: int, product_id: int) -> bool:
    cart = await get_cart_by_user_id(db, user_id)
    return cart is not None and find_item(cart, product_id) is not None


async def save_cart(db: AsyncSession, cart: Cart, created: bool = False):
    # Touching the row makes the version check part of every write
    cart.updated_at = utcnow()
    cart.items.reorder()
    # A new cart losing the unique user_id race is a concurrent write too
    conflicts = (IntegrityError,) if created else ()
    async with store_operation(db, "save cart", conflicts):
        await db.commit()


async def _require_cart(db: AsyncSession, user_id: int) -> Cart:
    cart = await get_cart_by_user_id(db, user_id)
    if cart is None:
        raise NotFound("Cart not found")
    return cart


# Add a product, merging quantities with an existing line
async def add_item(db: AsyncSession, user_id: int, payload: Any) -> CartMutation:
    item_in, errors = validate_cart_item(payload)
    if errors:
        raise InvalidInput(errors)

    async with cart_locks(user_id):
        cart = await get_cart_by_user_id(db, user_id)
        if cart is None:
            cart = Cart(user_id=user_id, items=[CartItem(product_id=item_in.product, quantity=item_in.quantity)])
            db.add(cart)
            outcome = CartOutcome.CREATED
        else:
            item = find_item(cart, item_in.product)
            if item is not None:
                if item.quantity + item_in.quantity > INT32_MAX:
                    raise InvalidInput([f"Quantity in cart cannot exceed {INT32_MAX}"])
                item.quantity += item_in.quantity
            else:
                cart.items.append(CartItem(product_id=item_in.product, quantity=item_in.quantity))
            outcome = CartOutcome.UPDATED

        await save_cart(db, cart, created=outcome is CartOutcome.CREATED)
        logger.info("Cart of user %s %s: +%s x product %s", user_id, outcome.value, item_in.quantity, item_in.product)
        return CartMutation(outcome, await get_cart(db, user_id))


# Set the quantity of a line already in the cart
async def update_item(db: AsyncSession, user_id: int, payload: Any) -> Cart:
    item_in, errors = validate_cart_item(payload)
    if errors:
        raise InvalidInput(errors)

    async with cart_locks(user_id):
        cart = await _require_cart(db, user_id)
        item = find_item(cart, item_in.product)
        if item is None:
            raise NotFound("Item not found in cart")

        item.quantity = item_in.quantity
        await save_cart(db, cart)
        logger.info("Cart of user %s: product %s set to %s", user_id, item_in.product, item_in.quantity)
        return await get_cart(db, user_id)


async def remove_item(db: AsyncSession, user_id: int, product_id: int) -> Cart:
    """Drop the line for product_id; removing an absent product is not an error."""
    async with cart_locks(user_id):
        cart = await _require_cart(db, user_id)
        for item in [item for item in cart.items if item.product_id == product_id]:
            cart.items.remove(item)

        await save_cart(db, cart)
        logger.info("Cart of user %s: product %s removed", user_id, product_id)
        return await get_cart(db, user_id)


# Overwrite every line of a user's cart, creating the cart when needed
async def replace_all_items(db: AsyncSession, actor: CurrentUser, target_user_id: int, payload: Any) -> CartMutation:
    if actor.id != target_user_id and not actor.is_admin:
        logger.warning("User %s tried to replace the cart of user %s", actor.id, target_user_id)
        raise Forbidden("Not allowed to modify another user's cart")

    items_in, errors = validate_cart_items(payload)
    if errors:
        raise InvalidInput(errors)

    async with cart_locks(target_user_id):
        cart = await get_cart_by_user_id(db, target_user_id)
        if cart is None:
            cart = Cart(user_id=target_user_id, items=[])
            db.add(cart)
            outcome = CartOutcome.CREATED
            existing = {}
        else:
            outcome = CartOutcome.UPDATED
            existing = {item.product_id: item for item in cart.items}

        # Lines for products already in the cart are reused so the
        # (cart, product) unique constraint holds within a single flush
        items = []
        for item_in in items_in:
            item = existing.get(item_in.product) or CartItem(product_id=item_in.product)
            item.quantity = item_in.quantity
            items.append(item)
        cart.items = items

        await save_cart(db, cart, created=outcome is CartOutcome.CREATED)
        logger.info("Cart of user %s %s with %s items by user %s",
                    target_user_id, outcome.value, len(items), actor.id)
        return CartMutation(outcome, await get_cart(db, target_user_id))
