"""API routes for the link tree."""

from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from .. import schemas
from ..dependencies import get_link_service, get_tag_service
from ..services.links import LinkService
from ..services.tags import TagService

router = APIRouter(prefix="/links", tags=["links"])


def _require_link(service: LinkService, link_id: int):
    link = service.get_link(link_id)
    if not link:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link not found")
    return link


@router.get("/", response_model=List[schemas.LinkRead])
def list_links(
    roots: bool = False,
    parent_id: Optional[int] = None,
    service: LinkService = Depends(get_link_service),
) -> List[schemas.LinkRead]:
    if parent_id is not None:
        return service.get_children(parent_id)
    if roots:
        return service.get_roots()
    return service.get_all()


@router.get("/search", response_model=List[schemas.LinkRead])
def search_links(
    q: str = Query(default=""),
    service: LinkService = Depends(get_link_service),
) -> List[schemas.LinkRead]:
    return service.search(q)


@router.get("/most-accessed", response_model=List[schemas.LinkRead])
def most_accessed(
    limit: int = Query(default=10, ge=1, le=200),
    service: LinkService = Depends(get_link_service),
) -> List[schemas.LinkRead]:
    return service.get_most_accessed(limit)


@router.get("/recent", response_model=List[schemas.LinkRead])
def recently_accessed(
    limit: int = Query(default=10, ge=1, le=200),
    service: LinkService = Depends(get_link_service),
) -> List[schemas.LinkRead]:
    return service.get_recent(limit)


@router.get("/{link_id}", response_model=schemas.LinkRead)
def get_link(link_id: int, service: LinkService = Depends(get_link_service)) -> schemas.LinkRead:
    return _require_link(service, link_id)


@router.post("/", response_model=schemas.LinkRead, status_code=status.HTTP_201_CREATED)
def create_link(
    payload: schemas.LinkCreate,
    service: LinkService = Depends(get_link_service),
) -> schemas.LinkRead:
    return service.create_link(payload)


@router.put("/{link_id}", response_model=schemas.LinkRead)
def update_link(
    link_id: int,
    payload: schemas.LinkUpdate,
    service: LinkService = Depends(get_link_service),
) -> schemas.LinkRead:
    return service.update_link(link_id, payload)


@router.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_link(link_id: int, service: LinkService = Depends(get_link_service)) -> None:
    if not service.delete_link(link_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link not found")


@router.delete("/{link_id}/tree", response_model=List[schemas.RemovedLink])
def delete_link_tree(
    link_id: int,
    service: LinkService = Depends(get_link_service),
) -> List[schemas.RemovedLink]:
    removed = service.delete_link_recursive(link_id)
    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link not found")
    return [schemas.RemovedLink(name=name, type=link_type) for name, link_type in removed]


@router.post("/{link_id}/move", response_model=schemas.LinkRead)
def move_link(
    link_id: int,
    payload: schemas.LinkMovePayload,
    service: LinkService = Depends(get_link_service),
) -> schemas.LinkRead:
    if not service.move_link(link_id, payload.parent_id, payload.sort_order):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link not found")
    return _require_link(service, link_id)


@router.post("/{link_id}/access", status_code=status.HTTP_204_NO_CONTENT)
def register_access(link_id: int, service: LinkService = Depends(get_link_service)) -> None:
    _require_link(service, link_id)
    service.record_access(link_id)


@router.get("/{link_id}/tags", response_model=List[schemas.TagRead])
def list_link_tags(
    link_id: int,
    service: TagService = Depends(get_tag_service),
) -> List[schemas.TagRead]:
    return service.get_tags_for_link(link_id)


@router.put("/{link_id}/tags/{tag_id}")
def add_link_tag(
    link_id: int,
    tag_id: int,
    service: TagService = Depends(get_tag_service),
) -> Dict[str, bool]:
    return {"changed": service.tag_link(link_id, tag_id)}


@router.delete("/{link_id}/tags/{tag_id}")
def remove_link_tag(
    link_id: int,
    tag_id: int,
    service: TagService = Depends(get_tag_service),
) -> Dict[str, bool]:
    return {"changed": service.remove_tag_from_link(link_id, tag_id)}
