# Role: Central configuration module. Loads .env into environment variables and computes runtime settings.
# Importers read alumni_bot.config.<NAME> at call time, so load_env() may run after import.

from __future__ import annotations

import os

from dotenv import load_dotenv

DEBUG: bool = False
LOG_LEVEL: str = "INFO"

GEMINI_MODEL: str = "gemini-1.5-flash"
AI_TIMEOUT_SECONDS: float = 30.0

MAX_SEARCH_RESULTS: int = 6
DAILY_SEARCH_LIMIT: int = 30
SESSION_TTL_MINUTES: int = 60
SEED_DEMO_DATA: bool = False


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def load_env() -> None:
    """
    Load .env into os.environ, then recompute every setting.
    This makes the settings correct even if load_env() is called after import.
    """
    global DEBUG, LOG_LEVEL, GEMINI_MODEL, AI_TIMEOUT_SECONDS
    global MAX_SEARCH_RESULTS, DAILY_SEARCH_LIMIT, SESSION_TTL_MINUTES, SEED_DEMO_DATA

    load_dotenv()
    # Key line: accept common truthy values.
    DEBUG = os.getenv("DEBUG", "0").lower() in {"1", "true", "yes"}
    LOG_LEVEL = "DEBUG" if DEBUG else os.getenv("LOG_LEVEL", "INFO").upper()

    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
    AI_TIMEOUT_SECONDS = _float_env("AI_TIMEOUT_SECONDS", 30.0)

    MAX_SEARCH_RESULTS = _int_env("MAX_SEARCH_RESULTS", 6)
    DAILY_SEARCH_LIMIT = _int_env("DAILY_SEARCH_LIMIT", 30)
    SESSION_TTL_MINUTES = _int_env("SESSION_TTL_MINUTES", 60)
    SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "0").lower() in {"1", "true", "yes"}
