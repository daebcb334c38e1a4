import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from notepad import crud
from notepad.api import deps
from notepad.core import security
from notepad.schemas.auth import LoginRequest, SetupRequest

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/setup")
def setup(
    req: SetupRequest,
    db: Session = Depends(deps.get_db),
) -> Any:
    """
    One-time creation of the admin account.
    """
    if not req.username or not req.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    if crud.admin.create(db, username=req.username, password=req.password) is None:
        raise HTTPException(status_code=409, detail="Admin account already configured")

    return {"success": True}

@router.post("/login")
def login(
    req: LoginRequest,
    response: Response,
    db: Session = Depends(deps.get_db),
) -> Any:
    if crud.admin.get(db) is None:
        raise HTTPException(status_code=409, detail="Setup required")

    config = crud.admin.authenticate(db, username=req.username, password=req.password)
    if not config:
        logger.warning("Failed login for %s", req.username)
        raise HTTPException(status_code=401, detail="Incorrect username or password")

    token = security.issue_session_token(config.username, config.password)
    security.set_session_cookie(response, token)
    return {"success": True}

@router.api_route("/logout", methods=["GET", "POST"])
def logout() -> Any:
    response = RedirectResponse(url="/", status_code=302)
    security.clear_session_cookie(response)
    return response
