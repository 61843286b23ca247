"""
Learning entries table API.

Accepts both the canonical payload (`categories` list) and the older one
(scalar `category`, `date`, bare-URL resources); rows are always stored in
the canonical shape.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, List

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session, select

from app.db import get_session
from app.models.learning_entry import LearningEntry
from app.schemas import (
    LearningEntryCreate,
    LearningEntryOut,
    LearningEntryUpdate,
    apply_primary_category,
)

router = APIRouter()
logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = ("title", "categories", "status", "progress", "skills", "difficulty", "completed_hours", "resources")


@router.get("", response_model=List[LearningEntryOut])
def list_learning_entries(session: Session = Depends(get_session)) -> Any:
    query = select(LearningEntry).order_by(LearningEntry.updated_at.desc(), LearningEntry.created_at.desc())
    return session.exec(query).all()


@router.get("/{entry_id}", response_model=LearningEntryOut)
def get_learning_entry(entry_id: uuid.UUID, session: Session = Depends(get_session)) -> Any:
    entry = session.get(LearningEntry, entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Learning entry not found")
    return entry


@router.post("", response_model=LearningEntryOut, status_code=201)
def create_learning_entry(entry_in: LearningEntryCreate, session: Session = Depends(get_session)) -> Any:
    now = datetime.now(timezone.utc)
    entry = LearningEntry(**entry_in.to_row(), created_at=now, updated_at=now)
    session.add(entry)
    session.commit()
    session.refresh(entry)

    logger.info("Learning entry created", entry_id=str(entry.id), category=entry.category)
    return entry


@router.patch("/{entry_id}", response_model=LearningEntryOut)
def update_learning_entry(
    entry_id: uuid.UUID,
    entry_in: LearningEntryUpdate,
    session: Session = Depends(get_session),
) -> Any:
    entry = session.get(LearningEntry, entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Learning entry not found")

    patch = entry_in.model_dump(mode="json", exclude_unset=True)
    primary = patch.pop("category", None)
    # Dates go back in as date objects, not their JSON strings
    for key in ("start_date", "target_date"):
        if key in patch:
            patch[key] = getattr(entry_in, key)

    for key, value in patch.items():
        if value is None and key in REQUIRED_FIELDS:
            continue
        setattr(entry, key, value)
    if primary:
        entry.categories = apply_primary_category(entry.categories or [], primary)
    entry.updated_at = datetime.now(timezone.utc)

    session.add(entry)
    session.commit()
    session.refresh(entry)

    logger.info("Learning entry updated", entry_id=str(entry.id), fields=sorted(patch))
    return entry


@router.delete("/{entry_id}", status_code=204)
def delete_learning_entry(entry_id: uuid.UUID, session: Session = Depends(get_session)) -> Response:
    entry = session.get(LearningEntry, entry_id)
    if entry:
        session.delete(entry)
        session.commit()
        logger.info("Learning entry deleted", entry_id=str(entry_id))
    return Response(status_code=204)
