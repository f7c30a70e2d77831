# mcsrboard/config.py
"""Defaults and environment overrides for the leaderboard client."""

from __future__ import annotations

import os

DEFAULT_BASE_URL = "https://api.mcsrranked.com"
DEFAULT_COUNTRY = "vn"

# 1 = casual, 2 = ranked, 3 = private, 4 = event
DEFAULT_MATCH_TYPE = 2
DEFAULT_MATCH_COUNT = 20
RECENT_MATCH_COUNT = 5
BOARD_LIMIT = 100

REQUEST_TIMEOUT_SECONDS = 20
MAX_ATTEMPTS = 3
BACKOFF_STEP_SECONDS = 1.0

MAX_WORKERS = 4
BATCH_SIZE = 5
BATCH_PAUSE_SECONDS = 0.2


def resolve_base_url(arg_url: str | None = None) -> str:
    env_url = os.getenv("MCSR_API_BASE", "").strip()
    chosen = arg_url or env_url or DEFAULT_BASE_URL
    return chosen.rstrip("/")


def resolve_country(arg_country: str | None = None) -> str:
    env_country = os.getenv("MCSR_COUNTRY", "").strip()
    chosen = arg_country or env_country or DEFAULT_COUNTRY
    return chosen.lower()
