"""Snippet API routes: CRUD, listing, likes, views, forks and versions."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from vinstack.database import get_db
from vinstack.deps import get_hub
from vinstack.models.folder import Folder
from vinstack.realtime.hub import ChannelHub
from vinstack.schemas.media import VideoAttach
from vinstack.schemas.snippet import (
    FolderCreate, FolderOut, LikeToggleOut, SnippetCreate, SnippetOut, SnippetUpdate, SnippetVersionOut,
    VersionCompareOut,
)
from vinstack.services import snippet_service
from vinstack.services.profile_service import get_profile_or_404

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=SnippetOut, status_code=status.HTTP_201_CREATED)
def create_snippet(payload: SnippetCreate, db: Session = Depends(get_db), hub: ChannelHub = Depends(get_hub)):
    """Create a snippet. Version 1 is recorded with it."""
    snippet = snippet_service.create_snippet(db, hub, **payload.model_dump())
    return snippet_service.snippet_to_dict(db, snippet)


@router.get("/", response_model=list[SnippetOut])
def list_snippets(
    viewer_id: Optional[str] = None,
    visibility: Optional[str] = None,
    language: Optional[str] = None,
    owner_id: Optional[str] = None,
    search: Optional[str] = None,
    tags: Optional[list[str]] = Query(default=None),
    db: Session = Depends(get_db),
):
    """Snippets visible to ``viewer_id`` (public only when anonymous), newest first."""
    snippets = snippet_service.list_snippets(
        db, viewer_id,
        visibility=visibility, language=language, owner_id=owner_id, search=search, tags=tags,
    )
    return [snippet_service.snippet_to_dict(db, s) for s in snippets]


@router.get("/{snippet_id}", response_model=SnippetOut)
def get_snippet(snippet_id: str, viewer_id: Optional[str] = None, db: Session = Depends(get_db)):
    snippet = snippet_service.get_viewable_snippet(db, snippet_id, viewer_id)
    return snippet_service.snippet_to_dict(db, snippet)


@router.put("/{snippet_id}", response_model=SnippetOut)
def update_snippet(
    snippet_id: str,
    payload: SnippetUpdate,
    actor_id: str = Query(..., description="ID of the user saving the snippet"),
    db: Session = Depends(get_db),
    hub: ChannelHub = Depends(get_hub),
):
    """Save changes; every save appends a version."""
    snippet = snippet_service.update_snippet(db, hub, snippet_id, actor_id, payload.model_dump(exclude_unset=True))
    return snippet_service.snippet_to_dict(db, snippet)


@router.delete("/{snippet_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_snippet(
    snippet_id: str,
    actor_id: str = Query(...),
    db: Session = Depends(get_db),
    hub: ChannelHub = Depends(get_hub),
):
    snippet_service.delete_snippet(db, hub, snippet_id, actor_id)


@router.post("/{snippet_id}/like", response_model=LikeToggleOut)
def toggle_like(
    snippet_id: str,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    hub: ChannelHub = Depends(get_hub),
):
    liked, count = snippet_service.toggle_like(db, hub, snippet_id, user_id)
    return LikeToggleOut(liked=liked, like_count=count)


@router.post("/{snippet_id}/views", status_code=status.HTTP_204_NO_CONTENT)
def record_view(snippet_id: str, user_id: Optional[str] = None, db: Session = Depends(get_db)):
    snippet_service.record_view(db, snippet_id, user_id)


@router.post("/{snippet_id}/fork", response_model=SnippetOut, status_code=status.HTTP_201_CREATED)
def fork_snippet(
    snippet_id: str,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    hub: ChannelHub = Depends(get_hub),
):
    fork = snippet_service.fork_snippet(db, hub, snippet_id, user_id)
    return snippet_service.snippet_to_dict(db, fork)


@router.get("/{snippet_id}/versions", response_model=list[SnippetVersionOut])
def list_versions(snippet_id: str, viewer_id: Optional[str] = None, db: Session = Depends(get_db)):
    """Version history, newest first."""
    return snippet_service.list_versions(db, snippet_id, viewer_id)


@router.get("/{snippet_id}/versions/compare", response_model=VersionCompareOut)
def compare_versions(
    snippet_id: str,
    from_version: int = Query(..., alias="from", ge=1),
    to_version: int = Query(..., alias="to", ge=1),
    viewer_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return snippet_service.compare_versions(db, snippet_id, from_version, to_version, viewer_id)


@router.post("/{snippet_id}/versions/{version_number}/restore", response_model=SnippetOut)
def restore_version(
    snippet_id: str,
    version_number: int,
    actor_id: str = Query(...),
    db: Session = Depends(get_db),
    hub: ChannelHub = Depends(get_hub),
):
    snippet = snippet_service.restore_version(db, hub, snippet_id, version_number, actor_id)
    return snippet_service.snippet_to_dict(db, snippet)


@router.put("/{snippet_id}/video", response_model=SnippetOut)
def attach_video(
    snippet_id: str,
    payload: VideoAttach,
    actor_id: str = Query(...),
    db: Session = Depends(get_db),
    hub: ChannelHub = Depends(get_hub),
):
    snippet = snippet_service.attach_video(db, hub, snippet_id, actor_id, payload.video_url)
    return snippet_service.snippet_to_dict(db, snippet)


folders_router = APIRouter()


@folders_router.post("/", response_model=FolderOut, status_code=status.HTTP_201_CREATED)
def create_folder(payload: FolderCreate, db: Session = Depends(get_db)):
    get_profile_or_404(db, payload.owner_id, detail="Owner not found")
    if payload.parent_id:
        parent = db.query(Folder).filter(Folder.folder_id == payload.parent_id).first()
        if not parent or parent.owner_id != payload.owner_id:
            raise HTTPException(status_code=404, detail="Parent folder not found")
    folder = Folder(**payload.model_dump())
    db.add(folder)
    db.commit()
    db.refresh(folder)
    logger.info("Created folder '%s' for user %s", folder.name, folder.owner_id)
    return folder


@folders_router.get("/", response_model=list[FolderOut])
def list_folders(owner_id: str, db: Session = Depends(get_db)):
    return db.query(Folder).filter(Folder.owner_id == owner_id).order_by(Folder.name).all()
