# config.py
import os

from dotenv import load_dotenv

# Carrega variaveis de ambiente a partir de um .env local.
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./gametasks.db")
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "20"))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))

# Opcional. Sem REDIS_URL as sessoes ficam na tabela "sessions".
REDIS_URL = os.getenv("REDIS_URL")

SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", str(24 * 60 * 60)))
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "gametasks_sid")
SESSION_COOKIE_SECURE = _env_bool("SESSION_COOKIE_SECURE", False)

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE")
