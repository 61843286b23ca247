"""
Experiments table API.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, List

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session, select

from app.db import get_session
from app.models.experiment import Experiment
from app.schemas import ExperimentCreate, ExperimentOut, ExperimentUpdate

router = APIRouter()
logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = ("title", "description", "category", "status", "progress", "technologies")


@router.get("", response_model=List[ExperimentOut])
def list_experiments(session: Session = Depends(get_session)) -> Any:
    query = select(Experiment).order_by(Experiment.updated_at.desc(), Experiment.created_at.desc())
    return session.exec(query).all()


@router.get("/{experiment_id}", response_model=ExperimentOut)
def get_experiment(experiment_id: uuid.UUID, session: Session = Depends(get_session)) -> Any:
    experiment = session.get(Experiment, experiment_id)
    if not experiment:
        raise HTTPException(status_code=404, detail="Experiment not found")
    return experiment


@router.post("", response_model=ExperimentOut, status_code=201)
def create_experiment(experiment_in: ExperimentCreate, session: Session = Depends(get_session)) -> Any:
    now = datetime.now(timezone.utc)
    experiment = Experiment(**experiment_in.model_dump(), created_at=now, updated_at=now)
    session.add(experiment)
    session.commit()
    session.refresh(experiment)

    logger.info("Experiment created", experiment_id=str(experiment.id), category=experiment.category)
    return experiment


@router.patch("/{experiment_id}", response_model=ExperimentOut)
def update_experiment(
    experiment_id: uuid.UUID,
    experiment_in: ExperimentUpdate,
    session: Session = Depends(get_session),
) -> Any:
    experiment = session.get(Experiment, experiment_id)
    if not experiment:
        raise HTTPException(status_code=404, detail="Experiment not found")

    patch = experiment_in.model_dump(exclude_unset=True)
    for key, value in patch.items():
        if value is None and key in REQUIRED_FIELDS:
            continue
        setattr(experiment, key, value)
    experiment.updated_at = datetime.now(timezone.utc)

    session.add(experiment)
    session.commit()
    session.refresh(experiment)

    logger.info("Experiment updated", experiment_id=str(experiment.id), fields=sorted(patch))
    return experiment


@router.delete("/{experiment_id}", status_code=204)
def delete_experiment(experiment_id: uuid.UUID, session: Session = Depends(get_session)) -> Response:
    experiment = session.get(Experiment, experiment_id)
    if experiment:
        session.delete(experiment)
        session.commit()
        logger.info("Experiment deleted", experiment_id=str(experiment_id))
    return Response(status_code=204)
