from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, List, Optional, Tuple
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from mcsrboard.config import (
    BACKOFF_STEP_SECONDS,
    DEFAULT_BASE_URL,
    DEFAULT_MATCH_COUNT,
    DEFAULT_MATCH_TYPE,
    MAX_ATTEMPTS,
    REQUEST_TIMEOUT_SECONDS,
)
from mcsrboard.models import MatchDetail, MatchRecord, PlayerEntry

LOGGER = logging.getLogger(__name__)


class RankedAPIError(Exception):
    pass


class PlayerNotFoundError(RankedAPIError):
    pass


class RateLimitedError(RankedAPIError):
    pass


class RankedAPIClient:
    HEADERS = {
        "User-Agent": "mcsrboard/0.1 (+https://github.com/mcsrboard)",
        "Accept": "application/json, text/plain, */*",
        "Accept-Language": "en-US,en;q=0.9",
    }

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: int = REQUEST_TIMEOUT_SECONDS,
        max_attempts: int = MAX_ATTEMPTS,
        backoff_seconds: float = BACKOFF_STEP_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds

    def _build_url(self, path: str, params: Optional[Dict[str, Any]] = None) -> str:
        url = f"{self.base_url}/{path.lstrip('/')}"
        query = {k: v for k, v in (params or {}).items() if v is not None}
        if query:
            url = f"{url}?{urlencode(query)}"
        return url

    @staticmethod
    def _is_retryable(exc: Exception) -> bool:
        if isinstance(exc, HTTPError):
            return exc.code == 429 or exc.code >= 500
        return isinstance(exc, (URLError, TimeoutError, ConnectionError))

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """GET a JSON payload, retrying transient failures with linear backoff."""
        url = self._build_url(path, params)
        req = Request(url, headers=self.HEADERS, method="GET")
        last_exc: Optional[Exception] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                with urlopen(req, timeout=self.timeout_seconds) as resp:
                    body = resp.read()
                break
            except (HTTPError, URLError, TimeoutError, ConnectionError) as exc:
                if not self._is_retryable(exc):
                    raise
                last_exc = exc
                if attempt < self.max_attempts:
                    delay = attempt * self.backoff_seconds
                    LOGGER.warning(
                        "GET %s failed (%s); retry %s/%s in %.1fs",
                        url, exc, attempt, self.max_attempts - 1, delay,
                    )
                    time.sleep(delay)
        else:
            if isinstance(last_exc, HTTPError) and last_exc.code == 429:
                raise RateLimitedError(f"Rate limited after {self.max_attempts} attempts: {url}") from last_exc
            raise RankedAPIError(f"GET {url} failed after {self.max_attempts} attempts: {last_exc}") from last_exc

        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise RankedAPIError(f"Malformed JSON from {url}: {exc}") from exc

        if not isinstance(payload, dict):
            raise RankedAPIError(f"Unexpected payload type from {url}: {type(payload).__name__}")
        if payload.get("status") != "success":
            message = payload.get("data") if isinstance(payload.get("data"), str) else payload.get("status")
            raise RankedAPIError(f"API error for {url}: {message}")
        return payload

    @staticmethod
    def _data(payload: Dict[str, Any]) -> Any:
        return payload.get("data") if isinstance(payload, dict) else None

    def parse_leaderboard(self, payload: Dict[str, Any]) -> Tuple[List[PlayerEntry], Optional[Dict[str, Any]]]:
        data = self._data(payload)
        data = data if isinstance(data, dict) else {}
        users = data.get("users", [])
        users = users if isinstance(users, list) else []
        season = data.get("season") if isinstance(data.get("season"), dict) else None
        players = [PlayerEntry.from_raw(u) for u in users if isinstance(u, dict)]
        return [p for p in players if p.uuid], season

    def parse_match_list(self, payload: Dict[str, Any]) -> List[MatchRecord]:
        # The match list shows up as data, data.matches or data.data depending on API version.
        data = self._data(payload)
        if isinstance(data, dict):
            data = data.get("matches", data.get("data", []))
        matches = data if isinstance(data, list) else []
        return [MatchRecord.from_raw(m) for m in matches if isinstance(m, dict)]

    def parse_match_detail(self, payload: Dict[str, Any]) -> MatchDetail:
        data = self._data(payload)
        if not isinstance(data, dict):
            raise RankedAPIError("Match detail payload has no data object")
        return MatchDetail.from_raw(data)

    def get_leaderboard(
        self,
        match_type: Optional[int] = None,
        country: Optional[str] = None,
        count: Optional[int] = None,
    ) -> Tuple[List[PlayerEntry], Optional[Dict[str, Any]]]:
        params = {"type": match_type, "country": country, "count": count}
        payload = self._get_json("leaderboard", params)
        players, season = self.parse_leaderboard(payload)
        LOGGER.info("Leaderboard: %s players (country=%s)", len(players), country or "all")
        return players, season

    def get_user(self, identifier: str) -> PlayerEntry:
        try:
            payload = self._get_json(f"users/{quote(identifier, safe='')}")
        except HTTPError as exc:
            if exc.code == 404:
                raise PlayerNotFoundError(f"Player '{identifier}' not found") from exc
            raise
        data = self._data(payload)
        if not isinstance(data, dict):
            raise PlayerNotFoundError(f"Player '{identifier}' not found")
        return PlayerEntry.from_raw(data)

    def get_user_matches(
        self,
        identifier: str,
        match_type: Optional[int] = DEFAULT_MATCH_TYPE,
        count: int = DEFAULT_MATCH_COUNT,
    ) -> List[MatchRecord]:
        try:
            payload = self._get_json(
                f"users/{quote(identifier, safe='')}/matches",
                {"type": match_type, "count": count},
            )
        except HTTPError as exc:
            if exc.code == 404:
                raise PlayerNotFoundError(f"Player '{identifier}' not found") from exc
            raise
        return self.parse_match_list(payload)

    def get_match(self, match_id: str) -> MatchDetail:
        payload = self._get_json(f"matches/{quote(str(match_id), safe='')}")
        return self.parse_match_detail(payload)
