"""API routes for tags."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from .. import schemas
from ..dependencies import get_tag_service
from ..services.tags import TagService

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("/", response_model=List[schemas.TagRead])
def list_tags(service: TagService = Depends(get_tag_service)) -> List[schemas.TagRead]:
    return service.get_all()


@router.get("/search", response_model=List[schemas.TagRead])
def search_tags(
    q: str = Query(default=""),
    service: TagService = Depends(get_tag_service),
) -> List[schemas.TagRead]:
    return service.search(q)


@router.get("/by-name/{name}", response_model=schemas.TagRead)
def get_tag_by_name(name: str, service: TagService = Depends(get_tag_service)) -> schemas.TagRead:
    tag = service.get_by_name(name)
    if not tag:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tag not found")
    return tag


@router.get("/{tag_id}", response_model=schemas.TagRead)
def get_tag(tag_id: int, service: TagService = Depends(get_tag_service)) -> schemas.TagRead:
    tag = service.get_tag(tag_id)
    if not tag:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tag not found")
    return tag


@router.get("/{tag_id}/links", response_model=List[schemas.LinkRead])
def list_tag_links(
    tag_id: int,
    service: TagService = Depends(get_tag_service),
) -> List[schemas.LinkRead]:
    return service.get_links_for_tag(tag_id)


@router.post("/", response_model=schemas.TagRead, status_code=status.HTTP_201_CREATED)
def create_tag(
    payload: schemas.TagCreate,
    service: TagService = Depends(get_tag_service),
) -> schemas.TagRead:
    return service.create_tag(payload)


@router.put("/{tag_id}", response_model=schemas.TagRead)
def update_tag(
    tag_id: int,
    payload: schemas.TagUpdate,
    service: TagService = Depends(get_tag_service),
) -> schemas.TagRead:
    return service.update_tag(tag_id, payload)


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tag(tag_id: int, service: TagService = Depends(get_tag_service)) -> None:
    if not service.delete_tag(tag_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tag not found")
