from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


async def count_rows(db: AsyncSession, stmt: Select) -> int:
    """Count rows a filtered select would return, ignoring pagination."""
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    result = await db.execute(count_stmt)
    return int(result.scalar() or 0)


def paginate(stmt: Select, page: int, limit: int) -> Select:
    if page > 0 and limit > 0:
        stmt = stmt.offset((page - 1) * limit).limit(limit)
    return stmt
