from fastapi import APIRouter

from notepad.api.api_v1.endpoints import login, notes, shares

api_router = APIRouter()
api_router.include_router(login.router, tags=["login"])
api_router.include_router(notes.router, tags=["notes"])
api_router.include_router(shares.router, prefix="/share", tags=["shares"])
