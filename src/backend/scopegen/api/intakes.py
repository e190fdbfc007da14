"""Intakes API router."""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from scopegen.api.deps import (
    get_current_user_id,
    get_scope_generator,
    intake_validation_http_error,
)
from scopegen.api.scopes import ScopeDocResponse, generate_scope_doc
from scopegen.db import get_db
from scopegen.generation.orchestrator import ScopeGenerator
from scopegen.models.intake import IntakeValidationError, validate_intake
from scopegen.services.intake_service import IntakeService
from scopegen.services.scope_service import ScopeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/intakes", tags=["intakes"])


# Response models
class IntakeResponse(BaseModel):
    id: str
    user_id: str
    project_name: str
    industry: str
    project_type: str
    content: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class IntakeListResponse(BaseModel):
    items: list[IntakeResponse]
    total: int
    limit: int
    offset: int


# Endpoints
@router.post("", response_model=IntakeResponse, status_code=201)
async def create_intake(
    data: dict[str, Any] = Body(...),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Validate and store a new intake (camelCase body)."""
    try:
        intake = validate_intake(data)
    except IntakeValidationError as e:
        logger.warning(f"Rejected intake: {e}")
        raise intake_validation_http_error(e)

    record = await IntakeService(db).create(user_id, intake)
    logger.info(f"Created intake: id={record.id}, project={record.project_name}")
    return record


@router.get("", response_model=IntakeListResponse)
async def list_intakes(
    limit: int = Query(default=50, le=100),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's intakes, newest first."""
    records, total = await IntakeService(db).list_intakes(user_id, limit=limit, offset=offset)
    return IntakeListResponse(
        items=[IntakeResponse.model_validate(r) for r in records],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{intake_id}", response_model=IntakeResponse)
async def get_intake(
    intake_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Get an intake by ID."""
    record = await IntakeService(db).get(intake_id, user_id)
    if not record:
        raise HTTPException(status_code=404, detail="Not found")
    return record


@router.patch("/{intake_id}", response_model=IntakeResponse)
async def update_intake(
    intake_id: str,
    data: dict[str, Any] = Body(...),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Merge changes into an intake; the result must still validate."""
    if not data:
        raise HTTPException(status_code=400, detail="Invalid update payload")
    try:
        record = await IntakeService(db).update(intake_id, user_id, data)
    except IntakeValidationError as e:
        raise intake_validation_http_error(e)
    if not record:
        raise HTTPException(status_code=404, detail="Not found")
    return record


@router.delete("/{intake_id}", status_code=204)
async def delete_intake(
    intake_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Delete an intake along with its scope documents."""
    deleted = await IntakeService(db).delete(intake_id, user_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Not found")


@router.post("/{intake_id}/generate", response_model=ScopeDocResponse, status_code=201)
async def generate_intake_scope(
    intake_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    generator: ScopeGenerator = Depends(get_scope_generator),
):
    """Generate the next scope document version for this intake."""
    return await generate_scope_doc(intake_id, user_id, db, generator)


@router.get("/{intake_id}/scopes", response_model=list[ScopeDocResponse])
async def list_intake_scopes(
    intake_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """List every scope document version for an intake, newest first."""
    if not await IntakeService(db).get(intake_id, user_id):
        raise HTTPException(status_code=404, detail="Not found")
    return await ScopeService(db).list_for_intake(intake_id, user_id)
