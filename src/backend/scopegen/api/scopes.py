"""Scope documents API router."""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from scopegen.api.deps import (
    generation_http_error,
    get_current_user_id,
    get_scope_generator,
    intake_validation_http_error,
)
from scopegen.db import get_db
from scopegen.db.models import ScopeDocStatus
from scopegen.generation.errors import ScopeGenerationError
from scopegen.generation.orchestrator import ScopeGenerator
from scopegen.models.common import CamelModel
from scopegen.models.intake import IntakeValidationError
from scopegen.services.scope_service import ScopeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scope", tags=["scope"])


# Request/Response models
class ScopeGenerateRequest(CamelModel):
    intake_id: str = Field(..., min_length=1)


class ScopeUpdate(CamelModel):
    edited_json: dict[str, Any] | None = None
    status: ScopeDocStatus | None = None


class ScopeDocResponse(BaseModel):
    id: str
    user_id: str
    intake_id: str
    status: str
    version: int
    generated_json: dict[str, Any]
    edited_json: dict[str, Any] | None
    export_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


async def generate_scope_doc(
    intake_id: str,
    user_id: str,
    db: AsyncSession,
    generator: ScopeGenerator,
):
    """Shared by both generate endpoints."""
    logger.info(f"Generating scope: intake_id={intake_id}, user_id={user_id}")
    service = ScopeService(db)
    try:
        scope_doc = await service.generate_for_intake(intake_id, user_id, generator)
    except IntakeValidationError as e:
        raise intake_validation_http_error(e)
    except ScopeGenerationError as e:
        raise generation_http_error(e)

    if not scope_doc:
        raise HTTPException(status_code=404, detail="Intake not found")
    logger.info(f"Generated scope: id={scope_doc.id}, version={scope_doc.version}")
    return scope_doc


# Endpoints
@router.post("/generate", response_model=ScopeDocResponse, status_code=201)
async def generate_scope(
    data: ScopeGenerateRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    generator: ScopeGenerator = Depends(get_scope_generator),
):
    """Generate a new scope document version for an intake."""
    return await generate_scope_doc(data.intake_id, user_id, db, generator)


@router.get("/{scope_id}", response_model=ScopeDocResponse)
async def get_scope(
    scope_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Get a scope document by ID."""
    scope_doc = await ScopeService(db).get(scope_id, user_id)
    if not scope_doc:
        raise HTTPException(status_code=404, detail="Not found")
    return scope_doc


@router.patch("/{scope_id}", response_model=ScopeDocResponse)
async def update_scope(
    scope_id: str,
    data: ScopeUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Save manual edits and/or change status. The generated document is kept as-is."""
    if "edited_json" not in data.model_fields_set and data.status is None:
        raise HTTPException(status_code=400, detail="Invalid update payload")

    changes: dict[str, Any] = {}
    if "edited_json" in data.model_fields_set:
        changes["edited_json"] = data.edited_json
    if data.status is not None:
        changes["status"] = data.status

    scope_doc = await ScopeService(db).update(scope_id, user_id, **changes)
    if not scope_doc:
        raise HTTPException(status_code=404, detail="Not found")
    return scope_doc


@router.delete("/{scope_id}", status_code=204)
async def delete_scope(
    scope_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Delete a scope document."""
    deleted = await ScopeService(db).delete(scope_id, user_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Not found")
