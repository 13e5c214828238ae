from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from structlog import get_logger

import repohub.logging  # noqa  # import to ensure logger is configured
from repohub.api.routes import explorer, projects, repositories, session, vec
from repohub.config import get_settings
from repohub.middleware.auth import AuthGateMiddleware
from repohub.middleware.cors import CorsHeadersMiddleware
from repohub.middleware.logging import (
    ErrorHandlingMiddleware,
    LogProcessTimeMiddleware,
    LogRequestIdMiddleware,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("Starting repohub", env=settings.REPOHUB_ENV, debug=settings.DEBUG)
    yield


app = FastAPI(title="repohub", lifespan=lifespan)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# the last middleware added is the outermost: CORS answers preflights
# before the auth gate sees them
app.add_middleware(AuthGateMiddleware)
app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(LogProcessTimeMiddleware)
app.add_middleware(LogRequestIdMiddleware)
app.add_middleware(CorsHeadersMiddleware)

app.include_router(session.router)
app.include_router(projects.router)
app.include_router(repositories.router)
app.include_router(vec.router)
# catch-all explorer paths go last
app.include_router(explorer.router)


@app.get("/")
async def index():
    return {"service": "repohub"}
