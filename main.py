# main.py

import argparse
import logging

from mcsrboard.api_client import RankedAPIClient
from mcsrboard.calculator import StatsCalculator
from mcsrboard.collector import StatsCollector
from mcsrboard.config import (
    BOARD_LIMIT,
    DEFAULT_MATCH_COUNT,
    DEFAULT_MATCH_TYPE,
    MAX_WORKERS,
    RECENT_MATCH_COUNT,
    resolve_base_url,
    resolve_country,
)
from mcsrboard.leaderboard import (
    LeaderboardRow,
    attach_summaries,
    build_board,
    search_players,
    sort_rows,
)
from mcsrboard.ui import TerminalUI

LOGGER = logging.getLogger(__name__)


def _load_board(api_client: RankedAPIClient, country: str, limit: int) -> list[LeaderboardRow]:
    """Country leaderboard plus global players tagging the country in their nickname."""
    by_country, _ = api_client.get_leaderboard(country=country)
    global_players, _ = api_client.get_leaderboard()

    merged = {p.uuid: p for p in global_players}
    merged.update({p.uuid: p for p in by_country})
    return build_board(merged.values(), country, limit=limit)


def _show_player(
    row: LeaderboardRow,
    api_client: RankedAPIClient,
    calculator: StatsCalculator,
    ui: TerminalUI,
    match_type: int,
    match_count: int,
) -> None:
    profile = api_client.get_user(row.uuid)
    matches = api_client.get_user_matches(row.uuid, match_type=match_type, count=match_count)
    summary = calculator.calculate(matches, row.uuid)
    recent = sorted(matches, key=lambda m: m.date, reverse=True)[:RECENT_MATCH_COUNT]

    ui.show_player_details(profile, calculator.calculate_profile_stats(profile), summary, recent)

    while True:
        match = ui.prompt_match(recent)
        if match is None:
            return
        if not match.id:
            ui.show_error("Match has no id")
            continue
        ui.show_match_detail(api_client.get_match(match.id))


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="MCSR Ranked country leaderboard")
    parser.add_argument("--country", default="", help="ISO2 country code (defaults to MCSR_COUNTRY or vn)")
    parser.add_argument("--type", type=int, default=DEFAULT_MATCH_TYPE, help="Match type for match windows (2 = ranked)")
    parser.add_argument("--count", type=int, default=DEFAULT_MATCH_COUNT, help="Matches per player to aggregate")
    parser.add_argument("--limit", type=int, default=BOARD_LIMIT, help="Maximum players on the board")
    parser.add_argument("--workers", type=int, default=MAX_WORKERS, help="Concurrent match-list requests")
    parser.add_argument("--base-url", default="", help="API base URL (defaults to MCSR_API_BASE)")
    parser.add_argument("--verbose", action="store_true", help="Verbose logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    country = resolve_country(args.country)
    api_client = RankedAPIClient(base_url=resolve_base_url(args.base_url))
    calculator = StatsCalculator()
    collector = StatsCollector(
        api_client,
        calculator,
        max_workers=args.workers,
        match_type=args.type,
        match_count=args.count,
    )
    ui = TerminalUI(calculator)

    board: list[LeaderboardRow] = []
    query = ''
    sort_key, descending = 'elo', True

    def visible() -> list[LeaderboardRow]:
        return sort_rows(search_players(board, query), sort_key, descending)

    try:
        board = _load_board(api_client, country, args.limit)
        ui.show_leaderboard(visible(), query)
    except Exception as e:
        ui.show_error(f"Could not load leaderboard: {e}")

    while True:
        choice = ui.show_menu(country)

        if choice == '1':
            # Refresh leaderboard
            try:
                board = _load_board(api_client, country, args.limit)
                if not board:
                    ui.show_error(f"No ranked players found for {country.upper()}")
                    continue
                ui.show_leaderboard(visible(), query)
            except Exception as e:
                ui.show_error(f"Could not load leaderboard: {e}")

        elif choice == '2':
            # Search
            query = ui.prompt_search()
            ui.show_leaderboard(visible(), query)

        elif choice == '3':
            # Sort
            sort_key, descending = ui.prompt_sort()
            ui.show_leaderboard(visible(), query)

        elif choice == '4':
            # Player details
            rows = visible()
            if not rows:
                ui.show_error("No players on the board yet")
                continue
            row = ui.prompt_player(rows)
            if row is None:
                ui.show_error("Player not found on the board")
                continue
            try:
                _show_player(row, api_client, calculator, ui, args.type, args.count)
            except Exception as e:
                ui.show_error(str(e))

        elif choice == '5':
            # Collect match stats for every board row
            if not board:
                ui.show_error("No players on the board yet")
                continue
            print(f"Collecting last {args.count} matches for {len(board)} players...")
            summaries = collector.collect([row.player for row in board], on_progress=ui.show_progress)
            board = attach_summaries(board, summaries)
            ui.show_success(f"Match stats ready for {len(summaries)}/{len(board)} players")
            if collector.errors:
                print(f"Stats unavailable for {len(collector.errors)} players:")
                for uuid, err in collector.errors.items():
                    print(f"  - {uuid}: {err}")
            ui.show_leaderboard(visible(), query)

        elif choice == '6':
            print("\nGoodbye!")
            break


if __name__ == '__main__':
    main()
