import uuid
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from notepad import crud, schemas
from notepad.api import deps
from notepad.core.config import settings

router = APIRouter(dependencies=[Depends(deps.get_current_admin)])

@router.post("/save", response_model=schemas.NoteSaved)
def save_note(
    *,
    db: Session = Depends(deps.get_db),
    note_in: schemas.NoteSave,
) -> Any:
    note_id = (note_in.id or "").strip() or uuid.uuid4().hex[:settings.NOTE_ID_LENGTH]
    if not note_in.code:
        raise HTTPException(status_code=400, detail="Content must not be empty")
    if note_id in settings.RESERVED_KEYS:
        raise HTTPException(status_code=400, detail="Reserved file name")

    crud.blob.put(db, key=note_id, body=note_in.code.encode("utf-8"))
    return {"success": True, "id": note_id}

@router.get("/get", response_model=schemas.NoteContent)
def read_note(
    db: Session = Depends(deps.get_db),
    note_id: Optional[str] = Query(None, alias="id"),
) -> Any:
    if not note_id:
        raise HTTPException(status_code=400, detail="Missing id")

    content = None
    if note_id not in settings.RESERVED_KEYS:
        content = crud.blob.get_text(db, key=note_id)
    if content is None:
        raise HTTPException(status_code=404, detail="File not found")
    return {"code": content}

@router.delete("/delete")
def delete_note(
    db: Session = Depends(deps.get_db),
    note_id: Optional[str] = Query(None, alias="id"),
) -> Any:
    """
    Delete a note and every share link that points at it.
    """
    if not note_id or note_id in settings.RESERVED_KEYS:
        raise HTTPException(status_code=400, detail="Cannot delete this file")

    crud.blob.delete(db, key=note_id)
    crud.share.remove_by_file(db, file_id=note_id)
    return {"success": True}

@router.get("/list", response_model=schemas.NoteList)
def list_notes(
    db: Session = Depends(deps.get_db),
) -> Any:
    rows = crud.blob.list_objects(db, exclude=settings.RESERVED_KEYS, limit=settings.CONTENT_LIST_LIMIT)
    files = [{"key": row.key, "size": row.size, "uploaded": row.uploaded_at} for row in rows]
    return {"success": True, "files": files}
