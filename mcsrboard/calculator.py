# mcsrboard/calculator.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Dict, List, Optional

from mcsrboard.models import MatchRecord, PlayerEntry, StatisticsSummary

LOGGER = logging.getLogger(__name__)

_ONE_DECIMAL = Decimal("0.1")


def round1(value: Any) -> float:
    """Round half-up to one decimal place (66.65 -> 66.7, not banker's rounding)."""
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int):
        number = Decimal(value)
    else:
        number = Decimal(str(value))
    if not number.is_finite():
        return float(number)
    # quantize needs room for every integer digit plus the decimal place
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, number.adjusted() + 3)
        return float(number.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def _mean(values: List[int]) -> Decimal:
    """Mean of integer times in Decimal, since int / int overflows past float range."""
    total = sum(values)
    with localcontext() as ctx:
        # a bit is less than a third of a decimal digit
        ctx.prec = max(ctx.prec, total.bit_length() // 3 + 3)
        return Decimal(total) / len(values)


def _coerce_matches(matches: Iterable[Any]) -> List[MatchRecord]:
    if isinstance(matches, (str, bytes)) or not isinstance(matches, Iterable):
        raise TypeError(f"matches must be an iterable of match records, got {type(matches).__name__}")

    records: List[MatchRecord] = []
    for raw in matches:
        if isinstance(raw, MatchRecord):
            records.append(raw)
        elif isinstance(raw, dict):
            records.append(MatchRecord.from_raw(raw))
        else:
            # Still counts toward the forfeit-rate denominator.
            LOGGER.warning("Unusable match record of type %s; treating as empty.", type(raw).__name__)
            records.append(MatchRecord())
    return records


def compute_statistics(matches: Iterable[Any], player_id: str) -> StatisticsSummary:
    """
    Aggregate a player's match window into a StatisticsSummary.

    Args:
        matches: MatchRecord objects or raw match dicts from the API
        player_id: uuid of the player the window belongs to

    Returns:
        Fully populated StatisticsSummary. Missing fields on a match are
        treated as absent information, never as errors.

    Streaks are measured over the window ordered newest first. Any match
    that is not a win (loss or no-result) ends a streak.
    """
    if not isinstance(player_id, str):
        raise TypeError(f"player_id must be a string, got {type(player_id).__name__}")

    records = _coerce_matches(matches)
    ordered = sorted(records, key=lambda m: m.date, reverse=True)

    wins = 0
    losses = 0
    forfeits = 0
    completion_times: List[int] = []
    temp_streak = 0
    best_streak = 0
    current_streak = 0
    current_open = True

    for match in ordered:
        if match.forfeited:
            forfeits += 1

        winner = match.winner_uuid
        if winner == player_id:
            wins += 1
            temp_streak += 1
            best_streak = max(best_streak, temp_streak)
            if current_open:
                current_streak = temp_streak
        else:
            if winner is not None:
                losses += 1
            temp_streak = 0
            current_open = False

        completion = match.completion_for(player_id)
        if completion is not None:
            completion_times.append(completion.time)

    total_matches = wins + losses
    win_rate = round1(wins / total_matches * 100) if total_matches > 0 else 0
    forfeit_rate = round1(forfeits / len(records) * 100) if records else 0

    if completion_times:
        best_time: Optional[int] = min(completion_times)
        average_time = round1(_mean(completion_times))
    else:
        best_time = None
        average_time = 0

    summary = StatisticsSummary(
        wins=wins,
        losses=losses,
        total_matches=total_matches,
        win_rate=win_rate,
        forfeits=forfeits,
        forfeit_rate=forfeit_rate,
        best_time=best_time,
        average_time=average_time,
        current_streak=current_streak,
        best_streak=best_streak,
    )
    LOGGER.debug("Computed stats for %s over %s matches: %s", player_id, len(records), summary)
    return summary


class StatsCalculator:
    """Derive leaderboard numbers from profiles and match windows."""

    LEGACY_SEASON_KEY = "2"

    @staticmethod
    def _safe_get(container: Dict[str, Any], key: str, default: Any = 0) -> Any:
        """Safely get a value from a dict, handling None."""
        value = container.get(key, default)
        return value if value is not None else default

    @staticmethod
    def _to_int(value: Any) -> int:
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            return 0

    def calculate(self, matches: Iterable[Any], player_id: str) -> StatisticsSummary:
        return compute_statistics(matches, player_id)

    def _season_counter(self, season: Dict[str, Any], key: str, mode: str) -> int:
        node = season.get(key)
        if isinstance(node, dict):
            return self._to_int(self._safe_get(node, mode))
        return 0

    def calculate_profile_stats(self, player: PlayerEntry, mode: str = "ranked") -> Dict[str, Any]:
        """
        Leaderboard row numbers from a player's profile statistics.

        Args:
            player: Leaderboard or profile entry
            mode: Counter bucket inside the season block ("ranked" or "casual")

        Returns:
            Dictionary with wins, losses, total, win_rate, kd, elo,
            highest_elo and rank
        """
        season = player.statistics.get("season") if isinstance(player.statistics, dict) else None
        season = season if isinstance(season, dict) else {}

        if "wins" in season or "loses" in season:
            wins = self._season_counter(season, "wins", mode)
            losses = self._season_counter(season, "loses", mode)
        else:
            legacy = season.get(self.LEGACY_SEASON_KEY)
            legacy = legacy if isinstance(legacy, dict) else {}
            wins = self._to_int(self._safe_get(legacy, "win"))
            losses = self._to_int(self._safe_get(legacy, "lose"))

        total = wins + losses
        elo = round(player.elo_rate or 0)
        highest = player.highest_elo_rate or player.elo_rate or 0

        return {
            "wins": wins,
            "losses": losses,
            "total": total,
            "win_rate": round1(wins / total * 100) if total > 0 else 0,
            "kd": round(wins / losses, 2) if losses > 0 else float(wins),
            "elo": elo,
            "highest_elo": round(highest),
            "rank": player.elo_rank or 0,
        }
