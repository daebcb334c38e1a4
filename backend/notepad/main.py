import logging

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError

from notepad.api import deps
from notepad.api.api_v1.api import api_router
from notepad.api.api_v1.endpoints import share_page
from notepad.core.config import settings
from notepad.core.errors import ShareLinkError, StoreFailure
from notepad.db.base import Base
from notepad.db.session import engine
from notepad.utils.pages import render_error_page

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_STR}/openapi.json"
)

# Set all CORS enabled origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], # In production, replace with specific origins
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_STR)
app.include_router(share_page.router, tags=["share"])

@app.get("/")
def read_root(config=Depends(deps.get_admin_config)):
    return {"message": f"Welcome to {settings.PROJECT_NAME}", "setupRequired": config is None}

@app.exception_handler(ShareLinkError)
async def share_link_exception_handler(request: Request, exc: ShareLinkError):
    return HTMLResponse(render_error_page(exc.title, exc.message), status_code=exc.status_code)

@app.exception_handler(StoreFailure)
async def store_failure_handler(request: Request, exc: StoreFailure):
    logger.error("Store failure on %s: %s", request.url.path, exc)
    if request.url.path == "/share":
        return HTMLResponse(render_error_page("System error", str(exc)), status_code=500)
    return JSONResponse(
        status_code=500,
        content={"message": "Storage Error", "detail": str(exc)},
    )

# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal Server Error", "detail": str(exc)},
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("Validation error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=422,
        content={"message": "Validation Error", "detail": exc.errors()},
    )

@app.on_event("startup")
async def startup_event():
    # Create tables for development
    Base.metadata.create_all(bind=engine)
    logger.info("Registered Routes:")
    for route in app.routes:
        if hasattr(route, "path"):
            logger.info("  %s", route.path)

if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8899)
