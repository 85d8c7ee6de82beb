"""
Read-only access to a user's applications, interviews and documents.
"""

from typing import List, Protocol, Sequence, runtime_checkable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrackr.models import Application, Interview, Document


@runtime_checkable
class ActivityRecords(Protocol):
    """Interface the gamification engine uses to read user records."""

    async def list_applications(self, user_id: str) -> Sequence[Application]:
        ...

    async def list_interviews(self, user_id: str) -> Sequence[Interview]:
        ...

    async def list_documents(self, user_id: str) -> Sequence[Document]:
        ...


class ActivityRecordsRepository:
    """SQLAlchemy implementation of ``ActivityRecords``. Results are newest first."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_applications(self, user_id: str) -> List[Application]:
        result = await self.db.execute(
            select(Application)
            .where(Application.user_id == user_id)
            .order_by(Application.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_interviews(self, user_id: str) -> List[Interview]:
        result = await self.db.execute(
            select(Interview)
            .where(Interview.user_id == user_id)
            .order_by(Interview.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_documents(self, user_id: str) -> List[Document]:
        result = await self.db.execute(
            select(Document)
            .where(Document.user_id == user_id)
            .order_by(Document.created_at.desc())
        )
        return list(result.scalars().all())
