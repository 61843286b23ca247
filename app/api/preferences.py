"""
Preferences API (sidebar state, profile and about-me blocks).
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from app.schemas import PreferenceValue
from app.services.preferences import PreferencesStore, get_preferences_store

router = APIRouter()


@router.get("")
def list_preferences(store: PreferencesStore = Depends(get_preferences_store)) -> Any:
    return store.load()


@router.get("/{key}")
def get_preference(key: str, store: PreferencesStore = Depends(get_preferences_store)) -> Any:
    values = store.load()
    if key not in values:
        raise HTTPException(status_code=404, detail="Preference not found")
    return {"key": key, "value": values[key]}


@router.put("/{key}")
def put_preference(
    key: str,
    body: PreferenceValue,
    store: PreferencesStore = Depends(get_preferences_store),
) -> Any:
    values = store.set(key, body.value)
    return {"key": key, "value": values[key]}
