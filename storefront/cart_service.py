# storefront/cart_service.py
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.auth import CurrentUser, get_current_user
from storefront.db.cart_functions import (
    CartMutation,
    add_item,
    get_cart,
    has_product,
    remove_item,
    replace_all_items,
    update_item,
)
from storefront.db.database import get_db
from storefront.db.schemas import CartCheckResponse, CartResponse
from storefront.db.validation import INT32_MAX

router = APIRouter(prefix="/api/cart", tags=["cart"])

OUTCOME_HEADER = "X-Cart-Outcome"

RowId = Annotated[int, Path(gt=0, le=INT32_MAX)]


def _mutation_response(response: Response, mutation: CartMutation):
    response.headers[OUTCOME_HEADER] = mutation.outcome.value
    return mutation.cart


# Null until the first product is added
@router.get("", response_model=Optional[CartResponse])
async def read_cart(user: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await get_cart(db, user.id)


@router.get("/check", response_model=CartCheckResponse)
async def check_cart(product_id: Annotated[int, Query(gt=0, le=INT32_MAX)], user: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return {"exists": await has_product(db, user.id, product_id)}


@router.post("/add", response_model=CartResponse)
async def add_to_cart(
    response: Response,
    payload: Any = Body(default=None),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return _mutation_response(response, await add_item(db, user.id, payload))


@router.put("/update", response_model=CartResponse)
async def update_cart_item_quantity(
    payload: Any = Body(default=None),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await update_item(db, user.id, payload)


@router.delete("/remove/{product_id}", response_model=CartResponse)
async def remove_from_cart(product_id: RowId, user: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await remove_item(db, user.id, product_id)


# Administrative bulk replace; callers other than the owner need the admin role
@router.put("/update/{user_id}", response_model=CartResponse)
async def update_cart_for_user(
    user_id: RowId,
    response: Response,
    payload: Any = Body(default=None),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return _mutation_response(response, await replace_all_items(db, user, user_id, payload))
