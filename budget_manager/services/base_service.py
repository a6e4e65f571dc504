"""
Base Service
- Holds the AsyncSession
- Raw SQL helper with a per-statement timeout, rows returned as dicts
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession


class BaseService:
    """Common base for services working on one AsyncSession"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def execute_query(
        self,
        query,
        params: Optional[Dict[str, Any]] = None,
        timeout: str = "10s",
    ) -> List[Dict[str, Any]]:
        await self.session.execute(text(f"SET LOCAL statement_timeout = '{timeout}'"))
        result = await self.session.execute(query, params or {})
        return [dict(row) for row in result.mappings().all()]
