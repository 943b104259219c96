"""Cliente Redis opcional para guardar sessoes, configurado via REDIS_URL."""
import logging
from typing import Optional
from urllib.parse import urlparse

import redis

logger = logging.getLogger(__name__)


def build_redis_client(redis_url: Optional[str]) -> Optional[redis.Redis]:
    """Retorna None se nao houver URL ou se ela for invalida."""
    if not redis_url:
        return None

    parsed = urlparse(redis_url)
    db_index = parsed.path.lstrip("/")
    try:
        return redis.Redis(
            host=parsed.hostname or "localhost",
            port=parsed.port or 6379,
            db=int(db_index) if db_index else 0,
            password=parsed.password,
            username=parsed.username,
            ssl=parsed.scheme == "rediss",
            decode_responses=True,  # evita precisar decodificar bytes nas leituras
        )
    except (ValueError, redis.RedisError):
        logger.warning("REDIS_URL invalida; usando sessoes no banco.")
        return None


def is_cache_available(client: Optional[redis.Redis]) -> bool:
    """Tenta dar ping no Redis; retorna False se nao houver cliente ou conexao falhar."""
    if not client:
        return False
    try:
        return bool(client.ping())
    except redis.RedisError:
        return False
