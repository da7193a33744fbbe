"""API routes for application settings."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from .. import schemas
from ..dependencies import get_settings_service
from ..services.settings import SettingsService

router = APIRouter(prefix="/settings", tags=["settings"])


def _read_setting(service: SettingsService, key: str) -> schemas.SettingRead:
    setting = service.settings.get_by_key(key)
    if not setting:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Setting not found")
    return setting


@router.get("/", response_model=List[schemas.SettingRead])
def list_settings(
    service: SettingsService = Depends(get_settings_service),
) -> List[schemas.SettingRead]:
    return service.get_all()


@router.post("/reset", response_model=List[schemas.SettingRead])
def reset_settings(
    service: SettingsService = Depends(get_settings_service),
) -> List[schemas.SettingRead]:
    service.reset_to_defaults()
    return service.get_all()


@router.get("/{key}", response_model=schemas.SettingRead)
def get_setting(
    key: str,
    service: SettingsService = Depends(get_settings_service),
) -> schemas.SettingRead:
    # Reading a known key that was never stored materialises its default.
    service.get(key)
    return _read_setting(service, key)


@router.put("/{key}", response_model=schemas.SettingRead)
def put_setting(
    key: str,
    payload: schemas.SettingWrite,
    service: SettingsService = Depends(get_settings_service),
) -> schemas.SettingRead:
    if not service.set(key, payload.value, payload.description):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid key")
    return _read_setting(service, key.strip())


@router.delete("/{key}", status_code=status.HTTP_204_NO_CONTENT)
def delete_setting(
    key: str,
    service: SettingsService = Depends(get_settings_service),
) -> None:
    if not service.delete(key):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Setting not found")
