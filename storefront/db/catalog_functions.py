# storefront/db/catalog_functions.py
import logging
from typing import Any, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from storefront.db.models import Product, Category
from storefront.db.validation import validate_product
from storefront.errors import InvalidInput, NotFound, store_operation

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND = "Product not found"


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _with_category(query):
    return query.options(selectinload(Product.category)).execution_options(populate_existing=True)


async def _fetch_products(db: AsyncSession, query) -> dict:
    async with store_operation(db, "list products"):
        result = await db.execute(_with_category(query.order_by(Product.id)))
    products = result.scalars().all()
    return {"count": len(products), "products": products}


async def _find_product(db: AsyncSession, product_id: int) -> Optional[Product]:
    async with store_operation(db, "fetch product"):
        result = await db.execute(_with_category(select(Product).filter(Product.id == product_id)))
    return result.scalar_one_or_none()


# All products, optionally filtered by a case-insensitive name search
async def list_products(db: AsyncSession, search: Optional[str] = None) -> dict:
    query = select(Product)
    if search:
        query = query.filter(Product.name.ilike(f"%{_escape_like(search)}%", escape="\\"))
    return await _fetch_products(db, query)


async def list_products_by_category(db: AsyncSession, category_id: int) -> dict:
    """An unknown or empty category is an empty listing, not an error."""
    return await _fetch_products(db, select(Product).filter(Product.category_id == category_id))


# Single product with its category
async def get_product_by_id(db: AsyncSession, product_id: int) -> Product:
    product = await _find_product(db, product_id)
    if product is None:
        raise NotFound(PRODUCT_NOT_FOUND)
    return product


async def get_all_categories(db: AsyncSession) -> List[Category]:
    async with store_operation(db, "list categories"):
        result = await db.execute(select(Category).order_by(Category.id))
    return result.scalars().all()


# Create a new product
async def create_product(db: AsyncSession, payload: Any) -> Product:
    product_in, errors = validate_product(payload)
    if errors:
        raise InvalidInput(errors)

    product = Product(**product_in.as_columns())
    async with store_operation(db, "create product"):
        db.add(product)
        await db.commit()
    logger.info("Created product %s (%s)", product.id, product.name)
    return await get_product_by_id(db, product.id)


# Replace every editable field of a product
async def update_product(db: AsyncSession, product_id: int, payload: Any) -> Product:
    product_in, errors = validate_product(payload)
    if errors:
        raise InvalidInput(errors)

    product = await get_product_by_id(db, product_id)
    for column, value in product_in.as_columns().items():
        setattr(product, column, value)
    async with store_operation(db, "update product"):
        await db.commit()
    logger.info("Updated product %s", product_id)
    return await get_product_by_id(db, product_id)


async def delete_product(db: AsyncSession, product_id: int) -> dict:
    product = await get_product_by_id(db, product_id)
    async with store_operation(db, "delete product"):
        await db.delete(product)
        await db.commit()
    logger.info("Deleted product %s", product_id)
    return {"message": "Product removed"}
