# mcsrboard/collector.py
"""
Fetch match windows for many players and aggregate each one.

Requests go through a bounded thread pool in fixed-size batches with a
short pause between batches, which keeps the request rate against the
ranking API explicit. Each player is independent: a failure is logged
and recorded, and the rest of the batch carries on.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional

from mcsrboard.api_client import RankedAPIClient
from mcsrboard.calculator import StatsCalculator
from mcsrboard.config import (
    BATCH_PAUSE_SECONDS,
    BATCH_SIZE,
    DEFAULT_MATCH_COUNT,
    DEFAULT_MATCH_TYPE,
    MAX_WORKERS,
)
from mcsrboard.models import PlayerEntry, StatisticsSummary

LOGGER = logging.getLogger(__name__)


class StatsCollector:
    """Collect StatisticsSummary objects for a list of players."""

    def __init__(
        self,
        client: RankedAPIClient,
        calculator: Optional[StatsCalculator] = None,
        max_workers: int = MAX_WORKERS,
        batch_size: int = BATCH_SIZE,
        batch_pause_seconds: float = BATCH_PAUSE_SECONDS,
        match_type: Optional[int] = DEFAULT_MATCH_TYPE,
        match_count: int = DEFAULT_MATCH_COUNT,
    ):
        self.client = client
        self.calculator = calculator or StatsCalculator()
        self.max_workers = max(1, max_workers)
        self.batch_size = max(1, batch_size)
        self.batch_pause_seconds = batch_pause_seconds
        self.match_type = match_type
        self.match_count = match_count
        self.errors: Dict[str, str] = {}

    def collect_one(self, player: PlayerEntry) -> StatisticsSummary:
        matches = self.client.get_user_matches(
            player.uuid,
            match_type=self.match_type,
            count=self.match_count,
        )
        return self.calculator.calculate(matches, player.uuid)

    def _batches(self, players: List[PlayerEntry]) -> Iterable[List[PlayerEntry]]:
        for start in range(0, len(players), self.batch_size):
            yield players[start:start + self.batch_size]

    def collect(self, players: Iterable[PlayerEntry], on_progress=None) -> Dict[str, StatisticsSummary]:
        """
        Collect summaries for every player.

        Args:
            players: Players to fetch, duplicates by uuid are fetched once
            on_progress: Optional callback(done, total) after each batch

        Returns:
            Mapping of player uuid to summary. Players whose fetch failed
            are absent and listed in ``self.errors``.
        """
        unique: List[PlayerEntry] = []
        seen = set()
        for player in players:
            if not player.uuid or player.uuid in seen:
                continue
            seen.add(player.uuid)
            unique.append(player)

        self.errors = {}
        results: Dict[str, StatisticsSummary] = {}
        total = len(unique)
        done = 0

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            batches = list(self._batches(unique))
            for index, batch in enumerate(batches):
                futures = [(player, pool.submit(self.collect_one, player)) for player in batch]
                for player, future in futures:
                    try:
                        results[player.uuid] = future.result()
                    except Exception as exc:
                        LOGGER.warning("Stats fetch failed for %s (%s): %s", player.nickname, player.uuid, exc)
                        self.errors[player.uuid] = str(exc)
                done += len(batch)
                if on_progress is not None:
                    on_progress(done, total)
                if index < len(batches) - 1 and self.batch_pause_seconds > 0:
                    time.sleep(self.batch_pause_seconds)

        LOGGER.info("Collected stats for %s/%s players (%s failed)", len(results), total, len(self.errors))
        return results
