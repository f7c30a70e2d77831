# mcsrboard/__init__.py
"""
MCSR Ranked country leaderboard.

Fetches leaderboard, profile and match data from the ranking API and
aggregates match windows into per-player statistics.
"""

from .api_client import RankedAPIClient, RankedAPIError, PlayerNotFoundError, RateLimitedError
from .calculator import StatsCalculator, compute_statistics
from .models import MatchRecord, MatchDetail, PlayerEntry, StatisticsSummary

__all__ = [
    'RankedAPIClient',
    'RankedAPIError',
    'PlayerNotFoundError',
    'RateLimitedError',
    'StatsCalculator',
    'compute_statistics',
    'MatchRecord',
    'MatchDetail',
    'PlayerEntry',
    'StatisticsSummary',
]
