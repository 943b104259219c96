import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from gametasks import config
from gametasks.api import router
from gametasks.cache.redis_client import build_redis_client, is_cache_available
from gametasks.db import build_engine, build_session_factory, init_db
from gametasks.errors import AppError, InternalError
from gametasks.schemas import field_errors
from gametasks.sessions import (
    DatabaseSessionStore,
    RedisSessionStore,
    SessionManager,
    SessionStore,
)

logger = logging.getLogger(__name__)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    message = (
        "Invalid task data"
        if request.url.path.startswith("/api/tasks")
        else "Invalid request data"
    )
    return JSONResponse(
        status_code=400,
        content={"message": message, "errors": field_errors(exc.errors(), skip_prefix=1)},
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # detalhe so no log; o cliente recebe uma mensagem generica
    logger.error(
        "Erro inesperado em %s %s", request.method, request.url.path, exc_info=exc
    )
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app(
    database_url: str = config.DATABASE_URL,
    redis_url: Optional[str] = config.REDIS_URL,
    session_store: Optional[SessionStore] = None,
    session_ttl_seconds: int = config.SESSION_TTL_SECONDS,
) -> FastAPI:
    engine = build_engine(database_url)
    init_db(engine)
    session_factory = build_session_factory(engine)

    redis_client = build_redis_client(redis_url)
    if session_store is None:
        if is_cache_available(redis_client):
            session_store = RedisSessionStore(redis_client)
        else:
            if redis_url:
                logger.warning("Redis indisponivel; usando sessoes no banco.")
            session_store = DatabaseSessionStore(session_factory)

    app = FastAPI(title="Game Event Tasks API")
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.redis_client = redis_client
    app.state.session_manager = SessionManager(session_store, session_ttl_seconds)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,  # o cookie de sessao precisa atravessar o CORS
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, unexpected_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.include_router(router)

    logger.info("App pronto (sessoes: %s).", session_store.kind)
    return app
