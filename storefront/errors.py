# storefront/errors.py
import logging
from contextlib import asynccontextmanager
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

logger = logging.getLogger(__name__)


class StorefrontError(Exception):
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class InvalidInput(StorefrontError):
    """The payload broke the contract; ``errors`` holds every violation."""
    status_code = 400

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class NotFound(StorefrontError):
    status_code = 404


class Forbidden(StorefrontError):
    status_code = 403


class CartConflict(StorefrontError):
    status_code = 409


class StoreFailure(StorefrontError):
    status_code = 500


@asynccontextmanager
async def store_operation(db: AsyncSession, action: str, conflicts=()):
    """Run store calls, rolling back and translating driver errors.

    ``conflicts`` lists extra exception types that mean another writer got there first.
    """
    try:
        yield
    except (StaleDataError, *conflicts) as exc:
        await db.rollback()
        logger.warning("Concurrent modification during %s: %s", action, exc)
        raise CartConflict("Cart was modified concurrently, retry the request") from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Store failure during %s", action)
        raise StoreFailure(f"Failed to {action}") from exc
