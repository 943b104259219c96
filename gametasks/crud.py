import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import ValidationError as SchemaError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gametasks.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from gametasks.models import Task, User
from gametasks.schemas import TaskCreate, TaskUpdate, field_errors
from gametasks.security import hash_password, verify_password

logger = logging.getLogger(__name__)

# maior id que cabe numa coluna INTEGER (64 bits)
MAX_ID = 2**63 - 1


@lru_cache(maxsize=1)
def _dummy_credential() -> str:
    return hash_password("dummy-password")


# ---- Usuarios ----

def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def create_user(db: Session, username: str, password: str) -> User:
    if get_user_by_username(db, username):
        raise ConflictError()

    user = User(username=username, password=hash_password(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # outro request registrou o mesmo username entre a checagem e o commit
        db.rollback()
        raise ConflictError() from exc
    db.refresh(user)
    logger.info("Usuario %s registrado (id=%s).", user.username, user.id)
    return user


def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
    user = get_user_by_username(db, username)
    if not user:
        # mesmo custo de KDF que uma senha errada
        verify_password(password, _dummy_credential())
        return None
    if not verify_password(password, user.password):
        return None
    return user


# ---- Tarefas ----

def get_tasks_for_user(db: Session, user_id: int) -> List[Task]:
    tasks = (
        db.query(Task)
        .filter(Task.user_id == user_id)
        .order_by(Task.start_date.asc(), Task.id.asc())
        .all()
    )
    logger.debug("Encontradas %s tarefas do usuario %s.", len(tasks), user_id)
    return tasks


def get_task(db: Session, task_id: int) -> Optional[Task]:
    """Busca por id sem filtrar por dono; quem chama checa o dono."""
    if not 1 <= task_id <= MAX_ID:
        return None
    return db.get(Task, task_id)


def get_owned_task(db: Session, task_id: int, user_id: int) -> Task:
    task = get_task(db, task_id)
    if not task:
        raise NotFoundError("Task not found")
    if task.user_id != user_id:
        raise AuthorizationError()
    return task


def create_task(db: Session, user_id: int, data: TaskCreate) -> Task:
    # user_id vem sempre da sessao, nunca do corpo do request
    task = Task(**data.model_dump(), user_id=user_id)
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("Tarefa %s criada para o usuario %s.", task.id, user_id)
    return task


def _task_fields(task: Task) -> dict:
    return {
        "title": task.title,
        "description": task.description,
        "eventType": task.event_type,
        "gameType": task.game_type,
        "startDate": task.start_date,
        "endDate": task.end_date,
        "isComplete": task.is_complete,
    }


def update_task(db: Session, task: Task, changes: TaskUpdate) -> Task:
    """
    Aplica apenas os campos enviados. O registro resultante e validado com o
    schema completo de criacao antes de qualquer escrita.
    """
    supplied = changes.model_dump(exclude_unset=True)
    merged = {**_task_fields(task), **changes.model_dump(exclude_unset=True, by_alias=True)}

    try:
        validated = TaskCreate.model_validate(merged)
    except SchemaError as exc:
        raise ValidationError("Invalid task data", field_errors(exc.errors())) from exc

    for field in supplied:
        setattr(task, field, getattr(validated, field))

    db.commit()
    db.refresh(task)
    logger.info("Tarefa %s atualizada (%s).", task.id, ", ".join(sorted(supplied)) or "sem campos")
    return task


def delete_task(db: Session, task_id: int) -> bool:
    """
    Deleta uma tarefa pelo ID.
    Retorna True se deletou, False se nao encontrou.
    """
    task = get_task(db, task_id)
    if not task:
        return False

    db.delete(task)
    db.commit()
    logger.info("Tarefa %s removida.", task_id)
    return True
