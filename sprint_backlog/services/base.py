import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.exceptions import ServiceError, StoreError


IntegrityErrorMapper = Callable[[IntegrityError], ServiceError]


def normalize_page(page: Optional[int], limit: Optional[int]) -> Tuple[int, int]:
    """Clamp pagination input to sane values (limit capped at 100)."""
    if not page or page < 1:
        page = DEFAULT_PAGE
    if not limit or limit < 1:
        limit = DEFAULT_PAGE_SIZE
    return page, min(limit, MAX_PAGE_SIZE)


class TransactionalService:
    """Base for services that own the session's transaction.

    Repositories only flush; every mutating operation runs inside
    ``_unit_of_work`` so the state change and its history rows commit
    or roll back together.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._logger = logging.getLogger(self.__class__.__module__)

    @asynccontextmanager
    async def _unit_of_work(
        self,
        operation: str,
        on_integrity_error: Optional[IntegrityErrorMapper] = None
    ) -> AsyncIterator[None]:
        try:
            yield
            await self.db.commit()
        except ServiceError:
            await self.db.rollback()
            raise
        except IntegrityError as e:
            await self.db.rollback()
            if on_integrity_error is not None:
                self._logger.warning("%s rejected by constraint: %s", operation, str(e.orig))
                raise on_integrity_error(e) from e
            self._logger.error("%s failed: %s", operation, str(e))
            raise StoreError(f"{operation} failed") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            self._logger.error("%s failed: %s", operation, str(e))
            raise StoreError(f"{operation} failed") from e
        except Exception:
            await self.db.rollback()
            raise
