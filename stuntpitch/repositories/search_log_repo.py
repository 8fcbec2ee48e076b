# stuntpitch/repositories/search_log_repo.py
from __future__ import annotations
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stuntpitch.models.search_log import SearchLog


async def log_search(session: AsyncSession, *, query: Optional[str], filters: dict[str, Any], results_count: int) -> SearchLog:
    row = SearchLog(query=query or "", filters=filters, results_count=results_count)
    session.add(row)
    await session.commit()
    return row
