"""Application configuration and Notion database settings."""

import os
from dotenv import load_dotenv

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

load_dotenv(os.path.join(BASE_DIR, ".env"))


def _env_int(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# ── App settings ──────────────────────────────────────────────────────────────
APP_PORT = _env_int("APP_PORT", _env_int("PORT", 8080))
LOG_LEVEL = (os.environ.get("LOG_LEVEL") or "INFO").strip().upper()

# ── Notion ────────────────────────────────────────────────────────────────────
NOTION_TOKEN = os.environ.get("NOTION_TOKEN", "")
TEAMS_DB_ID = os.environ.get("TEAMS_DB_ID", "")
CHALLENGES_DB_ID = os.environ.get("CHALLENGES_DB_ID", "")

NOTION_API_URL = os.environ.get("NOTION_API_URL", "https://api.notion.com/v1").rstrip("/")
NOTION_VERSION = os.environ.get("NOTION_VERSION", "2022-06-28")
NOTION_TIMEOUT = _env_float("NOTION_TIMEOUT", 30.0)

# Assumes no more than 100 teams; the team scan is not paginated.
TEAM_SCAN_PAGE_SIZE = _env_int("TEAM_SCAN_PAGE_SIZE", 100)

# ── Public challenge pages ───────────────────────────────────────────────────
CHALLENGE_BASE_URL = os.environ.get("CHALLENGE_BASE_URL", "https://marcbaumholz.notion.site/")


def require_notion_settings():
    """Raise if any of the Notion credentials or database ids is missing."""
    missing = [
        name
        for name, value in (
            ("NOTION_TOKEN", NOTION_TOKEN),
            ("TEAMS_DB_ID", TEAMS_DB_ID),
            ("CHALLENGES_DB_ID", CHALLENGES_DB_ID),
        )
        if not value
    ]
    if missing:
        raise RuntimeError(
            f"{', '.join(missing)} must be set in the environment or .env file"
        )
