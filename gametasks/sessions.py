"""
Sessoes do lado do servidor.

O cliente recebe apenas um identificador opaco (cookie). O payload guardado e
somente {"userId": <id>}; o usuario completo e buscado no banco a cada request.
"""
import json
import logging
import secrets
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional

import redis
from sqlalchemy.orm import Session, sessionmaker

from gametasks import crud
from gametasks.models import SessionRecord, User

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Interface chave-valor com expiracao."""

    kind = "abstract"

    @abstractmethod
    def get(self, session_id: str) -> Optional[dict]:
        ...

    @abstractmethod
    def set(self, session_id: str, data: dict, ttl_seconds: int) -> None:
        ...

    @abstractmethod
    def delete(self, session_id: str) -> None:
        ...

    @abstractmethod
    def clear_expired(self) -> int:
        ...


class DatabaseSessionStore(SessionStore):
    """Guarda as sessoes na tabela "sessions"."""

    kind = "database"

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get(self, session_id: str) -> Optional[dict]:
        with self.session_factory() as db:
            record = db.get(SessionRecord, session_id)
            if not record:
                return None

            if record.expires <= datetime.utcnow():
                # expirada conta como inexistente
                db.delete(record)
                db.commit()
                return None

            return json.loads(record.data)

    def set(self, session_id: str, data: dict, ttl_seconds: int) -> None:
        expires = datetime.utcnow() + timedelta(seconds=ttl_seconds)
        with self.session_factory() as db:
            record = db.get(SessionRecord, session_id)
            if record:
                record.data = json.dumps(data)
                record.expires = expires
            else:
                db.add(
                    SessionRecord(
                        session_id=session_id,
                        expires=expires,
                        data=json.dumps(data),
                    )
                )
            db.commit()

    def delete(self, session_id: str) -> None:
        with self.session_factory() as db:
            db.query(SessionRecord).filter(
                SessionRecord.session_id == session_id
            ).delete()
            db.commit()

    def clear_expired(self) -> int:
        with self.session_factory() as db:
            removed = (
                db.query(SessionRecord)
                .filter(SessionRecord.expires <= datetime.utcnow())
                .delete()
            )
            db.commit()
        if removed:
            logger.info("Removidas %s sessoes expiradas.", removed)
        return removed


class RedisSessionStore(SessionStore):
    """Guarda as sessoes no Redis; a expiracao fica por conta do TTL (SETEX)."""

    kind = "redis"
    key_prefix = "session:"

    def __init__(self, client: redis.Redis):
        self.client = client

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    def get(self, session_id: str) -> Optional[dict]:
        raw = self.client.get(self._key(session_id))
        if not raw:
            return None
        return json.loads(raw)

    def set(self, session_id: str, data: dict, ttl_seconds: int) -> None:
        self.client.setex(self._key(session_id), ttl_seconds, json.dumps(data))

    def delete(self, session_id: str) -> None:
        self.client.delete(self._key(session_id))

    def clear_expired(self) -> int:
        return 0


class SessionManager:
    """Cria, resolve e invalida sessoes usando o store injetado."""

    def __init__(self, store: SessionStore, ttl_seconds: int):
        self.store = store
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def serialize_user(user: User) -> dict:
        return {"userId": user.id}

    @staticmethod
    def deserialize_user(db: Session, data: dict) -> Optional[User]:
        user_id = data.get("userId")
        if not isinstance(user_id, int):
            return None
        return crud.get_user(db, user_id)

    def establish(self, user: User) -> str:
        """Abre uma sessao nova para o usuario e retorna o id dela."""
        self.store.clear_expired()
        session_id = secrets.token_urlsafe(32)
        self.store.set(session_id, self.serialize_user(user), self.ttl_seconds)
        return session_id

    def resolve(self, db: Session, session_id: Optional[str]) -> Optional[User]:
        """
        Retorna o usuario da sessao ou None (anonimo). Sessao ausente,
        expirada ou apontando para um usuario que nao existe mais contam
        como anonimo.
        """
        if not session_id:
            return None

        data = self.store.get(session_id)
        if not data:
            return None

        user = self.deserialize_user(db, data)
        if not user:
            logger.warning("Sessao aponta para usuario inexistente; ignorando.")
        return user

    def invalidate(self, session_id: Optional[str]) -> None:
        if session_id:
            self.store.delete(session_id)
