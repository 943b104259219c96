from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

# Valores reconhecidos pela interface. A API aceita qualquer texto nao vazio.
EVENT_TYPES = (
    "Tournament",
    "Community Event",
    "Special Mission",
    "Season Start",
    "Update Release",
)

GAME_TYPES = (
    "FPS",
    "MOBA",
    "RPG",
    "Strategy",
    "Card Game",
    "Battle Royale",
    "Other",
)


class CamelModel(BaseModel):
    """Atributos em snake_case, JSON em camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---- Usuarios ----

class UserPublic(CamelModel):
    id: int
    username: str
    created_at: datetime


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6)


class UserLogin(BaseModel):
    username: str
    password: str


# ---- Tarefas ----

def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Datas com fuso viram UTC sem tzinfo; o banco guarda tudo em UTC naive."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class TaskCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    event_type: str = Field(min_length=1, max_length=50)
    game_type: str = Field(min_length=1, max_length=50)
    start_date: datetime
    end_date: datetime
    is_complete: bool = False

    @field_validator("start_date")
    @classmethod
    def normalize_start(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @field_validator("end_date")
    @classmethod
    def end_not_before_start(cls, value: datetime, info: ValidationInfo) -> datetime:
        value = to_naive_utc(value)
        start = info.data.get("start_date")
        if start is not None and value < start:
            raise ValueError("endDate must not be before startDate")
        return value


class TaskUpdate(CamelModel):
    """
    Atualizacao parcial. O registro final (atual + alteracoes) e validado
    de novo com TaskCreate antes de salvar.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    event_type: Optional[str] = None
    game_type: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_complete: Optional[bool] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class TaskOut(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    event_type: str
    game_type: str
    start_date: datetime
    end_date: datetime
    is_complete: bool
    user_id: int


class TaskOptions(CamelModel):
    event_types: List[str]
    game_types: List[str]


def field_errors(errors: Iterable[dict], skip_prefix: int = 0) -> Dict[str, List[str]]:
    """
    Agrupa os erros do pydantic por campo: {"title": ["..."]}.
    skip_prefix remove partes iniciais do loc (ex.: "body" do FastAPI).
    """
    grouped: Dict[str, List[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())][skip_prefix:]
        field = ".".join(loc) or "body"
        grouped.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return grouped
