import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from core import settings
from core.db import Database
from core.logging import setup_logging
from core.responses import ApiError, envelope, error_envelope
from users.repository import UserRepository
from users.router import router as users_router
from users.store import MemoryUserStore, PostgresUserStore, UserStore

logger = logging.getLogger(__name__)


def build_user_store() -> UserStore:
    if settings.user_store_backend() == settings.STORE_MEMORY:
        return MemoryUserStore()
    db = Database(
        settings.database_url(),
        min_size=settings.db_pool_min_size(),
        max_size=settings.db_pool_max_size(),
        command_timeout=settings.db_command_timeout(),
    )
    return PostgresUserStore(db)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level())
    # One store handle per process, closed on shutdown.
    store = build_user_store()
    await store.open()
    app.state.user_repository = UserRepository(store)
    logger.info("startup user_store=%s", type(store).__name__)
    try:
        yield
    finally:
        await store.close()
        logger.info("shutdown")


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApiError)
async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error_envelope(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        f"{'.'.join(str(part) for part in err.get('loc', ()) if part != 'body')}: {err.get('msg')}"
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=envelope(success=False, message="invalid request", errors=errors),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = "route not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content=envelope(success=False, message=message))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, _: Exception) -> JSONResponse:
    logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=envelope(success=False, message="internal server error"))


app.include_router(users_router, tags=["users"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "user records api"}


_static_dir = settings.static_dir()
if _static_dir and Path(_static_dir).is_dir():
    app.mount("/static", StaticFiles(directory=_static_dir, html=True), name="static")
