import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    DATABASE_URL = os.getenv("DATABASE_URL")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    PRUNE_ORPHANED_RECOMMENDATIONS = _env_flag("PRUNE_ORPHANED_RECOMMENDATIONS")
    INTEREST_WEIGHT_KEYING = os.getenv("INTEREST_WEIGHT_KEYING", "name")
