import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

import gametasks.crud as crud
from gametasks import config
from gametasks.cache.redis_client import is_cache_available
from gametasks.db import get_db
from gametasks.errors import AuthenticationError, NotFoundError
from gametasks.models import User
from gametasks.schemas import (
    EVENT_TYPES,
    GAME_TYPES,
    TaskCreate,
    TaskOptions,
    TaskOut,
    TaskUpdate,
    UserCreate,
    UserLogin,
    UserPublic,
)
from gametasks.sessions import SessionManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def session_id_from(request: Request) -> Optional[str]:
    return request.cookies.get(config.SESSION_COOKIE_NAME)


def require_user(
    request: Request,
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
) -> User:
    """Guarda das rotas protegidas: sem sessao valida, 401 antes do handler."""
    user = sessions.resolve(db, session_id_from(request))
    if not user:
        raise AuthenticationError()
    return user


def start_session(
    request: Request, response: Response, sessions: SessionManager, user: User
) -> None:
    # descarta a sessao anterior do mesmo navegador, se houver
    sessions.invalidate(session_id_from(request))
    session_id = sessions.establish(user)
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=session_id,
        max_age=sessions.ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=config.SESSION_COOKIE_SECURE,
        path="/",
    )


# ---- Autenticacao ----

@router.post("/register", response_model=UserPublic, status_code=201)
def register(
    data: UserCreate,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
):
    user = crud.create_user(db, data.username, data.password)
    start_session(request, response, sessions, user)
    return UserPublic.model_validate(user)


@router.post("/login", response_model=UserPublic)
def login(
    data: UserLogin,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
):
    user = crud.authenticate_user(db, data.username, data.password)
    if not user:
        # mesma resposta para usuario inexistente e senha errada
        logger.warning("Falha de login para %r.", data.username)
        raise AuthenticationError("Invalid username or password")

    start_session(request, response, sessions, user)
    logger.info("Usuario %s autenticado.", user.id)
    return UserPublic.model_validate(user)


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
):
    sessions.invalidate(session_id_from(request))
    response.delete_cookie(config.SESSION_COOKIE_NAME, path="/")
    return {"message": "Logged out"}


@router.get("/user", response_model=UserPublic)
def current_user(user: User = Depends(require_user)):
    return UserPublic.model_validate(user)


# ---- Tarefas ----

@router.get("/tasks", response_model=List[TaskOut])
def list_tasks(user: User = Depends(require_user), db: Session = Depends(get_db)):
    tasks = crud.get_tasks_for_user(db, user.id)
    return [TaskOut.model_validate(task) for task in tasks]


@router.post("/tasks", response_model=TaskOut, status_code=201)
def create_task(
    task_in: TaskCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    task = crud.create_task(db, user.id, task_in)
    return TaskOut.model_validate(task)


@router.patch("/tasks/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    changes: TaskUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    task = crud.get_owned_task(db, task_id, user.id)
    updated = crud.update_task(db, task, changes)
    return TaskOut.model_validate(updated)


@router.delete("/tasks/{task_id}", status_code=204)
def delete_task(
    task_id: int,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    crud.get_owned_task(db, task_id, user.id)
    if not crud.delete_task(db, task_id):
        raise NotFoundError("Task not found")
    return Response(status_code=204)


# ---- Auxiliares ----

@router.get("/task-options", response_model=TaskOptions)
def task_options():
    """Tipos de evento e de jogo reconhecidos pela interface."""
    return TaskOptions(event_types=list(EVENT_TYPES), game_types=list(GAME_TYPES))


@router.get("/health")
def health(request: Request):
    """Indica qual store de sessao esta em uso e se o Redis responde."""
    return {
        "session_store": request.app.state.session_manager.store.kind,
        "redis_available": is_cache_available(request.app.state.redis_client),
    }
