"""Intake service - owner-scoped CRUD for client intakes."""

from typing import Any

import ulid
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scopegen.db.models import Intake as IntakeRecord
from scopegen.models.intake import Intake, validate_intake


def generate_intake_id() -> str:
    """Generate a unique intake ID."""
    return f"intk_{ulid.new().str.lower()}"


class IntakeService:
    """Service for intake CRUD operations.

    Every query is filtered by ``user_id``; a record owned by someone else
    behaves exactly like a missing one.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user_id: str, intake: Intake) -> IntakeRecord:
        """Store a validated intake."""
        record = IntakeRecord(
            id=generate_intake_id(),
            user_id=user_id,
            project_name=intake.project_name,
            industry=intake.industry.value,
            project_type=intake.project_type.value,
            content=intake.to_json_dict(),
        )
        self.db.add(record)
        await self.db.flush()
        await self.db.refresh(record)
        return record

    async def get(self, intake_id: str, user_id: str) -> IntakeRecord | None:
        """Get an intake by ID for its owner."""
        result = await self.db.execute(
            select(IntakeRecord).where(
                IntakeRecord.id == intake_id, IntakeRecord.user_id == user_id
            )
        )
        return result.scalar_one_or_none()

    async def list_intakes(
        self,
        user_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[IntakeRecord], int]:
        """List a user's intakes, newest first."""
        query = select(IntakeRecord).where(IntakeRecord.user_id == user_id)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.db.execute(count_query)).scalar() or 0

        query = (
            query.order_by(IntakeRecord.created_at.desc(), IntakeRecord.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def update(
        self, intake_id: str, user_id: str, changes: dict[str, Any]
    ) -> IntakeRecord | None:
        """Merge camelCase ``changes`` into the stored intake and re-validate.

        Raises:
            IntakeValidationError: if the merged record is no longer valid.
        """
        record = await self.get(intake_id, user_id)
        if not record:
            return None

        intake = validate_intake({**record.content, **changes})

        record.content = intake.to_json_dict()
        record.project_name = intake.project_name
        record.industry = intake.industry.value
        record.project_type = intake.project_type.value

        await self.db.flush()
        await self.db.refresh(record)
        return record

    async def delete(self, intake_id: str, user_id: str) -> bool:
        """Delete an intake and every scope document generated from it."""
        result = await self.db.execute(
            select(IntakeRecord)
            .where(IntakeRecord.id == intake_id, IntakeRecord.user_id == user_id)
            .options(selectinload(IntakeRecord.scope_docs))
        )
        record = result.scalar_one_or_none()
        if not record:
            return False

        await self.db.delete(record)
        await self.db.flush()
        return True

    def to_intake(self, record: IntakeRecord) -> Intake:
        """Convert a stored record back to a canonical Intake.

        Raises:
            IntakeValidationError: if the stored content no longer validates.
        """
        return validate_intake(record.content)
