# mcsrboard/ui.py

from typing import List, Dict, Any, Optional

from mcsrboard.calculator import StatsCalculator
from mcsrboard.formatting import (
    format_change,
    format_date,
    format_rate,
    format_time,
    timeline_label,
)
from mcsrboard.leaderboard import LeaderboardRow, SORT_KEYS
from mcsrboard.models import MatchDetail, MatchRecord, PlayerEntry, StatisticsSummary

MENU_CHOICES = ['1', '2', '3', '4', '5', '6']


class TerminalUI:
    """Simple terminal-based UI."""

    WIDTH = 86

    def __init__(self, calculator: Optional[StatsCalculator] = None):
        self.calculator = calculator or StatsCalculator()

    @staticmethod
    def _safe_print(message: str = '') -> None:
        """Print with a plain fallback for terminals that can't encode player names."""
        try:
            print(message)
        except UnicodeEncodeError:
            print(message.encode('ascii', 'replace').decode('ascii'))

    def _rule(self, char: str = '=') -> None:
        print(char * self.WIDTH)

    def show_menu(self, country: str) -> str:
        """Show main menu and get validated user choice."""
        print()
        self._rule()
        print(f"MCSR RANKED - {country.upper()} LEADERBOARD")
        self._rule()
        print("1. Refresh leaderboard")
        print("2. Search players")
        print("3. Sort leaderboard")
        print("4. View player details")
        print("5. Collect match stats for board")
        print("6. Exit")
        self._rule()

        while True:
            choice = input(f"Choose an option (1-{len(MENU_CHOICES)}): ").strip()
            if choice in MENU_CHOICES:
                return choice
            print(f"Error: Please enter a number between 1 and {len(MENU_CHOICES)}")

    def prompt_search(self) -> str:
        return input("Search nickname (empty to clear): ").strip()

    def prompt_sort(self) -> tuple[str, bool]:
        keys = list(SORT_KEYS)
        print("Sort by: " + ", ".join(keys))
        while True:
            key = input("Sort key (default elo): ").strip().lower() or 'elo'
            if key in SORT_KEYS:
                break
            print(f"Error: Unknown sort key '{key}'")
        order = input("Descending? [Y/n]: ").strip().lower()
        return key, order not in ('n', 'no')

    def prompt_player(self, rows: List[LeaderboardRow]) -> Optional[LeaderboardRow]:
        """Pick a row by board position or nickname."""
        choice = input("\nEnter board position or nickname: ").strip()
        if not choice:
            return None
        if choice.isdigit():
            index = int(choice) - 1
            return rows[index] if 0 <= index < len(rows) else None
        lowered = choice.lower()
        for row in rows:
            if row.nickname.lower() == lowered:
                return row
        return None

    def prompt_match(self, matches: List[MatchRecord]) -> Optional[MatchRecord]:
        if not matches:
            return None
        choice = input("Open match # (Enter to go back): ").strip()
        if not choice.isdigit():
            return None
        index = int(choice) - 1
        return matches[index] if 0 <= index < len(matches) else None

    def show_leaderboard(self, rows: List[LeaderboardRow], query: str = '') -> None:
        """Display the board, with a podium line when no search is active."""
        print()
        self._rule()
        print(f"FOUND {len(rows)} PLAYERS" + (f" matching '{query}'" if query else ''))
        self._rule()

        if not rows:
            print("No players found")
            self._rule()
            return

        if len(rows) >= 3 and not query:
            podium = [f"{place}. {row.nickname} ({row.player.elo_rate or 0} ELO)"
                      for place, row in zip(('1st', '2nd', '3rd'), rows[:3])]
            self._safe_print("Podium: " + " | ".join(podium))
            self._rule('-')

        header = (f"{'#':<4}{'Player':<17}{'ELO':>6}{'W':>5}{'L':>5}{'WR':>8}{'Games':>7}"
                  f"{'Form':>8}{'FF':>7}{'Best':>11}{'Streak':>8}")
        print(header)
        self._rule('-')
        for position, row in enumerate(rows, 1):
            season = self.calculator.calculate_profile_stats(row.player)
            s = row.summary
            form = format_rate(s.win_rate) if s else '-'
            forfeit_rate = format_rate(s.forfeit_rate) if s else '-'
            best = format_time(s.best_time) if s else '-'
            streak = f"{s.current_streak}/{s.best_streak}" if s else '-'
            self._safe_print(
                f"{position:<4}{row.nickname[:16]:<17}{row.player.elo_rate or 0:>6}"
                f"{season['wins']:>5}{season['losses']:>5}{format_rate(season['win_rate']):>8}{season['total']:>7}"
                f"{form:>8}{forfeit_rate:>7}{best:>11}{streak:>8}"
            )
        self._rule()

    def show_player_details(
        self,
        player: PlayerEntry,
        profile_stats: Dict[str, Any],
        summary: Optional[StatisticsSummary] = None,
        recent_matches: Optional[List[MatchRecord]] = None,
    ):
        """Display profile stats, match-window stats and recent matches."""
        print()
        self._rule()
        self._safe_print(f"PLAYER DETAILS: {player.nickname}")
        self._rule()
        print(f"Country:          {(player.country or 'N/A').upper()}")
        print(f"ELO:              {profile_stats.get('elo', 0)} (peak {profile_stats.get('highest_elo', 0)})")
        print(f"Rank:             #{profile_stats.get('rank', 0)}")

        print("\n" + "-" * self.WIDTH)
        print("SEASON")
        print("-" * self.WIDTH)
        print(f"Wins:             {profile_stats.get('wins', 0)}")
        print(f"Losses:           {profile_stats.get('losses', 0)}")
        print(f"Matches:          {profile_stats.get('total', 0)}")
        print(f"Win %:            {format_rate(profile_stats.get('win_rate', 0))}")
        print(f"W/L:              {profile_stats.get('kd', 0):.2f}")

        if summary is not None:
            print("\n" + "-" * self.WIDTH)
            print("RECENT FORM")
            print("-" * self.WIDTH)
            print(f"Record:           {summary.wins}W {summary.losses}L ({format_rate(summary.win_rate)})")
            print(f"Forfeits:         {summary.forfeits} ({format_rate(summary.forfeit_rate)})")
            print(f"Best Time:        {format_time(summary.best_time)}")
            print(f"Average Time:     {format_time(summary.average_time)}")
            print(f"Current Streak:   {summary.current_streak}")
            print(f"Best Streak:      {summary.best_streak}")

        print("\n" + "-" * self.WIDTH)
        print("RECENT MATCHES")
        print("-" * self.WIDTH)
        if recent_matches:
            for idx, match in enumerate(recent_matches, 1):
                print(self._match_line(idx, match, player.uuid))
        else:
            print("No recent matches")
        self._rule()

    @staticmethod
    def _match_line(idx: int, match: MatchRecord, uuid: str) -> str:
        winner = match.winner_uuid
        if winner == uuid:
            outcome = 'WIN '
        elif winner is None:
            outcome = 'DRAW'
        else:
            outcome = 'LOSS'
        change = match.change_for(uuid)
        elo = f"{format_change(change.change)} ELO" if change else ''
        finish = format_time(match.result.time) if match.result else 'N/A'
        ff = ' (FF)' if match.forfeited else ''
        return f"{idx}. {outcome}{ff:<6}{elo:<10}{format_date(match.date):<18}{finish}"

    def show_match_detail(self, detail: MatchDetail) -> None:
        """Players, completions and per-player split timelines of one match."""
        print()
        self._rule()
        finish = format_time(detail.result.time) if detail.result else 'N/A'
        print(f"MATCH {detail.id or '?'}  {format_date(detail.date)}"
              + (f"  season {detail.season}" if detail.season is not None else '')
              + f"  time {finish}")
        self._rule()

        print("PLAYERS")
        for entry in detail.players:
            marker = ' *' if entry.uuid == detail.winner_uuid else '  '
            change = detail.change_for(entry.uuid)
            delta = format_change(change.change) if change else '+0'
            elo = change.elo_rate if change and change.elo_rate is not None else entry.elo_rate
            self._safe_print(f"{marker}{entry.nickname:<20}{elo or 0:>6} ELO  {delta}")

        if detail.completions:
            print("\nCOMPLETIONS")
            for place, comp in enumerate(sorted(detail.completions, key=lambda c: c.time), 1):
                entry = detail.player(comp.uuid)
                name = entry.nickname if entry else comp.uuid
                self._safe_print(f"  {place}. {name:<20}{format_time(comp.time)}")

        if detail.timelines:
            print("\nTIMELINES")
            for entry in detail.players:
                events = detail.timelines_for(entry.uuid)
                if not events:
                    continue
                self._safe_print(f"  {entry.nickname}")
                for event in events:
                    print(f"    {timeline_label(event.type):<22}{format_time(event.time)}")
        self._rule()

    def show_progress(self, done: int, total: int) -> None:
        print(f"  Collected {done}/{total} players", flush=True)

    def show_error(self, message: str):
        """Display error message."""
        print(f"\nERROR: {message}\n")

    def show_success(self, message: str):
        """Display success message."""
        print(f"\n{message}\n")
