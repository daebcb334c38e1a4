from typing import Any, Callable, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from sqlalchemy.orm import Session

from notepad import crud, schemas
from notepad.api import deps
from notepad.core.config import settings
from notepad.core.errors import SourceMissing, Unauthorized
from notepad.core.security import verify_session_token
from notepad.utils.pages import render_password_page, render_share_page

router = APIRouter()

@router.api_route("/share", methods=["GET", "POST"], response_class=HTMLResponse)
def open_share(
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(deps.get_db),
    session_factory: Callable[[], Session] = Depends(deps.get_session_factory),
    session_token: Optional[str] = Depends(deps.get_session_token),
    k: Optional[str] = None,
    file_id: Optional[str] = Query(None, alias="id"),
    raw: Optional[str] = None,
    password: Optional[str] = Form(None),
) -> Any:
    """
    Public entry point for share links.

    ?k=<token> goes through the share index; ?id=<fileId> is an admin-only
    preview that bypasses it.
    """
    if file_id:
        if not verify_session_token(session_token, crud.admin.get(db)):
            raise Unauthorized()
        content = None
        if file_id not in settings.RESERVED_KEYS:
            content = crud.blob.get_text(db, key=file_id)
        if content is None:
            raise SourceMissing("The requested file does not exist.")
        return HTMLResponse(render_share_page(content, file_id, is_public=False))

    # Only a submitted form counts as a password attempt
    supplied = (password or "") if request.method == "POST" else None
    resolution = crud.share.resolve(db, token=k, password=supplied, raw=raw == "true")

    if resolution.state == schemas.ResolveState.NEEDS_PASSWORD:
        return HTMLResponse(
            render_password_page(resolution.token, raw=resolution.raw, rejected=resolution.password_rejected)
        )

    background_tasks.add_task(crud.record_view_detached, session_factory, resolution.token)

    if resolution.raw:
        return PlainTextResponse(resolution.content, headers={"Access-Control-Allow-Origin": "*"})
    return HTMLResponse(render_share_page(resolution.content, resolution.file_id, is_public=True))
