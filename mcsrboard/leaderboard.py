# mcsrboard/leaderboard.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from mcsrboard.config import BOARD_LIMIT
from mcsrboard.models import PlayerEntry, StatisticsSummary


@dataclass
class LeaderboardRow:
    player: PlayerEntry
    summary: Optional[StatisticsSummary] = None

    @property
    def uuid(self) -> str:
        return self.player.uuid

    @property
    def nickname(self) -> str:
        return self.player.nickname


SORT_KEYS = {
    'elo': lambda row: row.player.elo_rate,
    'rank': lambda row: row.player.elo_rank,
    'nickname': lambda row: row.player.nickname.lower(),
    'wins': lambda row: row.summary.wins if row.summary else None,
    'losses': lambda row: row.summary.losses if row.summary else None,
    'win_rate': lambda row: row.summary.win_rate if row.summary else None,
    'forfeit_rate': lambda row: row.summary.forfeit_rate if row.summary else None,
    'best_time': lambda row: row.summary.best_time if row.summary else None,
    'average_time': lambda row: (row.summary.average_time or None) if row.summary else None,
    'best_streak': lambda row: row.summary.best_streak if row.summary else None,
}


def filter_country(players: Iterable[PlayerEntry], country: str) -> List[PlayerEntry]:
    """Players flagged with the country, or carrying its code in their nickname."""
    code = country.strip().lower()
    if not code:
        return list(players)
    tag = code.upper()
    return [
        p for p in players
        if (p.country or '').lower() == code or tag in (p.nickname or '').upper()
    ]


def build_board(players: Iterable[PlayerEntry], country: str, limit: int = BOARD_LIMIT) -> List[LeaderboardRow]:
    selected = filter_country(players, country)
    selected.sort(key=lambda p: p.elo_rate or 0, reverse=True)
    return [LeaderboardRow(player=p) for p in selected[:limit]]


def search_players(rows: Iterable[LeaderboardRow], query: str) -> List[LeaderboardRow]:
    needle = (query or '').strip().lower()
    if not needle:
        return list(rows)
    return [row for row in rows if needle in (row.nickname or '').lower()]


def sort_rows(rows: Iterable[LeaderboardRow], key: str = 'elo', descending: bool = True) -> List[LeaderboardRow]:
    """None-safe sort; rows missing the value always go last."""
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key '{key}'. Choose from: {', '.join(SORT_KEYS)}")
    getter = SORT_KEYS[key]

    present: List[tuple[Any, LeaderboardRow]] = []
    missing: List[LeaderboardRow] = []
    for row in rows:
        value = getter(row)
        if value is None:
            missing.append(row)
        else:
            present.append((value, row))

    present.sort(key=lambda pair: pair[0], reverse=descending)
    return [row for _, row in present] + missing


def attach_summaries(rows: Iterable[LeaderboardRow], summaries: dict) -> List[LeaderboardRow]:
    out = []
    for row in rows:
        out.append(LeaderboardRow(player=row.player, summary=summaries.get(row.uuid, row.summary)))
    return out
