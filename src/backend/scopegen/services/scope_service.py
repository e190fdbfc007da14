"""Scope document service - generation, versioning and manual edits."""

import logging

import ulid
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from scopegen.db.models import ScopeDoc, ScopeDocStatus
from scopegen.generation.orchestrator import ScopeGenerator
from scopegen.services.intake_service import IntakeService

logger = logging.getLogger(__name__)

_UNSET = object()


def generate_scope_doc_id() -> str:
    """Generate a unique scope document ID."""
    return f"scope_{ulid.new().str.lower()}"


class ScopeService:
    """Service for scope documents.

    Generated content is written exactly once per version. Manual edits are
    stored in ``edited_json`` next to it and never replace it.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, scope_id: str, user_id: str) -> ScopeDoc | None:
        """Get a scope document by ID for its owner."""
        result = await self.db.execute(
            select(ScopeDoc).where(ScopeDoc.id == scope_id, ScopeDoc.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def list_for_intake(self, intake_id: str, user_id: str) -> list[ScopeDoc]:
        """Get every version for an intake, newest version first."""
        result = await self.db.execute(
            select(ScopeDoc)
            .where(ScopeDoc.intake_id == intake_id, ScopeDoc.user_id == user_id)
            .order_by(ScopeDoc.version.desc())
        )
        return list(result.scalars().all())

    async def latest_version(self, intake_id: str, user_id: str) -> int:
        """Highest stored version for an (owner, intake) pair, 0 if none."""
        result = await self.db.execute(
            select(func.max(ScopeDoc.version)).where(
                ScopeDoc.intake_id == intake_id, ScopeDoc.user_id == user_id
            )
        )
        return result.scalar() or 0

    async def generate_for_intake(
        self,
        intake_id: str,
        user_id: str,
        generator: ScopeGenerator,
    ) -> ScopeDoc | None:
        """Generate and store the next version of a scope document.

        Returns None if the intake does not exist for this user.

        Raises:
            IntakeValidationError: stored intake no longer validates.
            ScopeGenerationError: generation failed (see generation.errors).
        """
        intake_service = IntakeService(self.db)
        record = await intake_service.get(intake_id, user_id)
        if not record:
            return None

        intake = intake_service.to_intake(record)
        document = await generator.generate(intake)

        # Read "latest + 1" as late as possible; concurrent generations for the
        # same intake can still collide.
        next_version = await self.latest_version(intake_id, user_id) + 1

        scope_doc = ScopeDoc(
            id=generate_scope_doc_id(),
            user_id=user_id,
            intake_id=intake_id,
            status=ScopeDocStatus.GENERATED.value,
            version=next_version,
            generated_json=document.to_json_dict(),
            edited_json=None,
        )
        self.db.add(scope_doc)
        await self.db.flush()
        await self.db.refresh(scope_doc)

        logger.info(
            "Stored scope document %s (intake=%s, version=%d)",
            scope_doc.id,
            intake_id,
            next_version,
        )
        return scope_doc

    async def update(
        self,
        scope_id: str,
        user_id: str,
        edited_json: dict | None | object = _UNSET,
        status: ScopeDocStatus | None = None,
    ) -> ScopeDoc | None:
        """Update the edited variant and/or status. ``generated_json`` is never touched."""
        scope_doc = await self.get(scope_id, user_id)
        if not scope_doc:
            return None

        if edited_json is not _UNSET:
            scope_doc.edited_json = edited_json
        if status is not None:
            scope_doc.status = status.value

        await self.db.flush()
        await self.db.refresh(scope_doc)
        return scope_doc

    async def delete(self, scope_id: str, user_id: str) -> bool:
        """Delete a scope document. Returns False if not found."""
        scope_doc = await self.get(scope_id, user_id)
        if not scope_doc:
            return False

        await self.db.delete(scope_doc)
        await self.db.flush()
        return True
