# db.py
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from gametasks import config

Base = declarative_base()


def build_engine(
    database_url: str = config.DATABASE_URL,
    pool_size: int = config.DB_POOL_SIZE,
    pool_timeout: int = config.DB_POOL_TIMEOUT,
) -> Engine:
    """
    Cria o engine com pool limitado. Quando o pool esgota, o request espera
    ate pool_timeout segundos por uma conexao livre.
    """
    is_sqlite = database_url.startswith("sqlite")

    # pool_pre_ping detecta conexoes quebradas.
    pool_args = {"pool_pre_ping": True}
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    if not is_sqlite:
        pool_args["pool_size"] = pool_size
        pool_args["max_overflow"] = 0
        pool_args["pool_timeout"] = pool_timeout

    return create_engine(database_url, connect_args=connect_args, **pool_args)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    import gametasks.models  # noqa: F401  registra as classes no Base

    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Iterator[Session]:
    """Dependencia para pegar sessao (FastAPI)."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
