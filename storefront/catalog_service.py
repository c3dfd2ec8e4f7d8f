# storefront/catalog_service.py
from typing import Annotated, Any, List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.auth import CurrentUser, get_current_user
from storefront.db.catalog_functions import (
    create_product,
    delete_product,
    get_all_categories,
    get_product_by_id,
    list_products,
    list_products_by_category,
    update_product,
)
from storefront.db.database import get_db
from storefront.db.schemas import CategorySchemas, MessageResponse, ProductListResponse, ProductSchema
from storefront.db.validation import INT32_MAX

router = APIRouter(prefix="/api", tags=["catalog"])

RowId = Annotated[int, Path(gt=0, le=INT32_MAX)]


@router.get("/products", response_model=ProductListResponse)
async def read_products(search: Optional[str] = Query(default=None), db: AsyncSession = Depends(get_db)):
    return await list_products(db, search)


@router.get("/products/category/{category_id}", response_model=ProductListResponse)
async def read_products_by_category(category_id: RowId, db: AsyncSession = Depends(get_db)):
    return await list_products_by_category(db, category_id)


@router.get("/products/{product_id}", response_model=ProductSchema)
async def read_product(product_id: RowId, db: AsyncSession = Depends(get_db)):
    return await get_product_by_id(db, product_id)


@router.post("/products", response_model=ProductSchema, status_code=201)
async def create_new_product(
    payload: Any = Body(default=None),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await create_product(db, payload)


@router.put("/products/{product_id}", response_model=ProductSchema)
async def update_existing_product(
    product_id: RowId,
    payload: Any = Body(default=None),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await update_product(db, product_id, payload)


@router.delete("/products/{product_id}", response_model=MessageResponse)
async def delete_existing_product(
    product_id: RowId,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await delete_product(db, product_id)


@router.get("/categories", response_model=List[CategorySchemas])
async def get_categories(db: AsyncSession = Depends(get_db)):
    return await get_all_categories(db)
