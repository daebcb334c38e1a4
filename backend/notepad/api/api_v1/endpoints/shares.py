from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from notepad import crud, schemas
from notepad.api import deps
from notepad.core.config import settings

router = APIRouter(dependencies=[Depends(deps.get_current_admin)])

@router.post("/create", response_model=schemas.ShareCreated)
def create_share(
    *,
    db: Session = Depends(deps.get_db),
    share_in: schemas.ShareCreate,
) -> Any:
    """
    Create a share link. The public URL is /share?k=<token>.
    """
    if share_in.file_id in settings.RESERVED_KEYS:
        raise HTTPException(status_code=400, detail="Reserved files cannot be shared")

    token = crud.share.create(db, obj_in=share_in)
    return {"success": True, "token": token}

@router.get("/list", response_model=schemas.ShareList)
def list_shares(
    db: Session = Depends(deps.get_db),
) -> Any:
    """
    List live shares. Expired ones are removed from the index on the way.
    """
    return {"success": True, "shares": crud.share.list_active(db)}

@router.delete("/delete")
def delete_share(
    db: Session = Depends(deps.get_db),
    token: Optional[str] = None,
) -> Any:
    if token:
        crud.share.remove(db, token=token)
    return {"success": True}

@router.post("/batch_delete")
def batch_delete_shares(
    *,
    db: Session = Depends(deps.get_db),
    batch_in: schemas.ShareBatchDelete,
) -> Any:
    crud.share.remove_many(db, tokens=batch_in.tokens)
    return {"success": True}
