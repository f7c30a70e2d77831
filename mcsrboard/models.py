# mcsrboard/models.py
"""
Canonical record types for ranking API payloads.

Raw JSON from the ranking API is ragged: fields go missing, turn up as
null, or arrive as numeric strings. Every ``from_raw`` constructor here
adapts one raw payload into a fixed shape so that the aggregation code
never has to guess.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


def _safe_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        # "1e3", "inf", 1e400 (parsed as inf)
        try:
            return int(float(value))
        except (TypeError, ValueError, OverflowError):
            return default


def _safe_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, (list, tuple)) else []


@dataclass(frozen=True)
class Completion:
    uuid: str
    time: int

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["Completion"]:
        raw = _as_dict(raw)
        uuid = _safe_str(raw.get("uuid"))
        time = _safe_int(raw.get("time"))
        if uuid is None or time is None:
            return None
        return cls(uuid=uuid, time=time)


@dataclass(frozen=True)
class MatchResult:
    uuid: Optional[str] = None
    time: Optional[int] = None

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["MatchResult"]:
        if not isinstance(raw, dict):
            return None
        return cls(uuid=_safe_str(raw.get("uuid")), time=_safe_int(raw.get("time")))


@dataclass(frozen=True)
class EloChange:
    uuid: str
    change: Optional[int] = None
    elo_rate: Optional[int] = None

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["EloChange"]:
        raw = _as_dict(raw)
        uuid = _safe_str(raw.get("uuid"))
        if uuid is None:
            return None
        return cls(
            uuid=uuid,
            change=_safe_int(raw.get("change")),
            elo_rate=_safe_int(raw.get("eloRate")),
        )


@dataclass(frozen=True)
class Timeline:
    uuid: str
    time: int
    type: str

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["Timeline"]:
        raw = _as_dict(raw)
        uuid = _safe_str(raw.get("uuid"))
        time = _safe_int(raw.get("time"))
        kind = _safe_str(raw.get("type"))
        if uuid is None or time is None or kind is None:
            return None
        return cls(uuid=uuid, time=time, type=kind)


@dataclass(frozen=True)
class PlayerEntry:
    uuid: str
    nickname: str = "Unknown"
    elo_rate: Optional[int] = None
    elo_rank: Optional[int] = None
    country: Optional[str] = None
    highest_elo_rate: Optional[int] = None
    statistics: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_raw(cls, raw: Any) -> "PlayerEntry":
        raw = _as_dict(raw)
        country = _safe_str(raw.get("country"))
        return cls(
            uuid=_safe_str(raw.get("uuid")) or "",
            nickname=_safe_str(raw.get("nickname") or raw.get("username")) or "Unknown",
            elo_rate=_safe_int(raw.get("eloRate")),
            elo_rank=_safe_int(raw.get("eloRank")),
            country=country.lower() if country else None,
            highest_elo_rate=_safe_int(raw.get("highestEloRate")),
            statistics=_as_dict(raw.get("statistics")),
        )


@dataclass(frozen=True)
class MatchRecord:
    """One match from a player's match list, normalized."""

    id: Optional[str] = None
    date: int = 0
    season: Optional[int] = None
    forfeited: bool = False
    result: Optional[MatchResult] = None
    completions: Tuple[Completion, ...] = ()
    match_type: Optional[int] = None
    players: Tuple[PlayerEntry, ...] = ()
    changes: Tuple[EloChange, ...] = ()

    @property
    def winner_uuid(self) -> Optional[str]:
        return self.result.uuid if self.result is not None else None

    def completion_for(self, uuid: str) -> Optional[Completion]:
        for completion in self.completions:
            if completion.uuid == uuid:
                return completion
        return None

    def change_for(self, uuid: str) -> Optional[EloChange]:
        for change in self.changes:
            if change.uuid == uuid:
                return change
        return None

    @staticmethod
    def _common_fields(raw: Dict[str, Any]) -> Dict[str, Any]:
        match_id = raw.get("id")
        if match_id is None:
            match_id = raw.get("matchId")
        completions = (Completion.from_raw(c) for c in _as_list(raw.get("completions")))
        changes = (EloChange.from_raw(c) for c in _as_list(raw.get("changes")))
        players = (PlayerEntry.from_raw(p) for p in _as_list(raw.get("players")) if isinstance(p, dict))
        return {
            "id": _safe_str(match_id),
            "date": _safe_int(raw.get("date"), 0),
            "season": _safe_int(raw.get("season")),
            "forfeited": bool(raw.get("forfeited") or False),
            "result": MatchResult.from_raw(raw.get("result")),
            "completions": tuple(c for c in completions if c is not None),
            "match_type": _safe_int(raw.get("type")),
            "players": tuple(players),
            "changes": tuple(c for c in changes if c is not None),
        }

    @classmethod
    def from_raw(cls, raw: Any) -> "MatchRecord":
        return cls(**cls._common_fields(_as_dict(raw)))


@dataclass(frozen=True)
class MatchDetail(MatchRecord):
    timelines: Tuple[Timeline, ...] = ()

    @classmethod
    def from_raw(cls, raw: Any) -> "MatchDetail":
        raw = _as_dict(raw)
        timelines = (Timeline.from_raw(t) for t in _as_list(raw.get("timelines")))
        return cls(
            **cls._common_fields(raw),
            timelines=tuple(t for t in timelines if t is not None),
        )

    def player(self, uuid: str) -> Optional[PlayerEntry]:
        for entry in self.players:
            if entry.uuid == uuid:
                return entry
        return None

    def timelines_for(self, uuid: str) -> list[Timeline]:
        return sorted((t for t in self.timelines if t.uuid == uuid), key=lambda t: t.time)


@dataclass(frozen=True)
class StatisticsSummary:
    """Aggregated match-window statistics for one player."""

    wins: int = 0
    losses: int = 0
    total_matches: int = 0
    win_rate: float = 0
    forfeits: int = 0
    forfeit_rate: float = 0
    best_time: Optional[int] = None
    average_time: float = 0
    current_streak: int = 0
    best_streak: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "wins": self.wins,
            "losses": self.losses,
            "totalMatches": self.total_matches,
            "winRate": self.win_rate,
            "forfeits": self.forfeits,
            "forfeitRate": self.forfeit_rate,
            "bestTime": self.best_time,
            "averageTime": self.average_time,
            "currentStreak": self.current_streak,
            "bestStreak": self.best_streak,
        }
