import asyncio
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
from sleeper_sync.config import settings
from sleeper_sync.exceptions import UserNotFound, NoLeaguesFound, is_not_found
from sleeper_sync.integrations.sleeper_api import SleeperAPIClient
from sleeper_sync.schemas.sleeper import SleeperLeague, SleeperMatchup, SleeperPlayer
from sleeper_sync.services.persistence import PersistenceAdapter
from sleeper_sync.utils.batching import gather_in_batches
import logging

logger = logging.getLogger(__name__)

@dataclass
class SyncProgress:
    stage: str
    progress: int
    total: int
    message: str

@dataclass
class SyncResult:
    success: bool = True
    leagues_processed: int = 0
    rosters_processed: int = 0
    matchups_processed: int = 0
    drafts_processed: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

@dataclass
class LeagueSyncCounts:
    """Rows written for a single league; owned by that league's task only"""
    rosters: int = 0
    matchups: int = 0
    drafts: int = 0

@dataclass
class LeagueSyncOutcome:
    league_id: str
    counts: LeagueSyncCounts
    success: bool = True
    error: Optional[str] = None

ProgressCallback = Callable[[SyncProgress], None]

class SyncService:
    """Mirrors a Sleeper user's league history into the local database"""

    def __init__(
        self,
        client: SleeperAPIClient,
        persistence: PersistenceAdapter,
        on_progress: Optional[ProgressCallback] = None,
        sport: str = settings.default_sport,
        batch_size: int = settings.batch_size,
        matchup_batch_delay: float = settings.matchup_batch_delay
    ):
        self.client = client
        self.persistence = persistence
        self.on_progress = on_progress
        self.sport = sport
        self.batch_size = batch_size
        self.matchup_batch_delay = matchup_batch_delay

    def _report_progress(self, stage: str, progress: int, total: int, message: str):
        if not self.on_progress:
            return
        try:
            self.on_progress(SyncProgress(stage, progress, total, message))
        except Exception as e:
            logger.warning(f"Progress callback failed at stage '{stage}': {e}")

    def season_window(self) -> tuple:
        """(start_year, end_year) of the seasons to discover"""
        current_year = datetime.now().year
        start_year = max(settings.earliest_season, current_year - (settings.history_years - 1))
        return start_year, current_year

    async def sync_user_leagues(self, username: str) -> SyncResult:
        """
        Sync every league a Sleeper user played in over the season window.

        Never raises: a missing user or an empty league history fails the
        whole run, while a failing league is recorded in errors and the
        remaining leagues keep syncing.
        """
        result = SyncResult()

        try:
            # Step 1: Resolve the Sleeper user
            self._report_progress('user', 0, 1, 'Fetching Sleeper user...')
            sleeper_user = await self.client.get_user(username)
            if not sleeper_user:
                raise UserNotFound(username)
            self._report_progress('user', 1, 1, 'User found')

            # Step 2: Discover leagues, most recent seasons first
            self._report_progress('leagues', 0, 1, 'Fetching all leagues...')
            start_year, end_year = self.season_window()
            leagues = await self.client.discover_leagues_for_user_across_years(
                sleeper_user.user_id, self.sport, start_year, end_year
            )
            logger.info(f"Found {len(leagues)} leagues for user {username} ({sleeper_user.user_id})")

            if not leagues:
                logger.warning(f"No leagues found for user {username}")
                raise NoLeaguesFound(username)

            self._report_progress('leagues', len(leagues), len(leagues), f"Found {len(leagues)} leagues")

            # Step 3: Sync leagues in concurrent batches
            def batch_done(done: int, total: int):
                self._report_progress('processing', done, total, f"Processed {done} of {total} leagues...")

            outcomes = await gather_in_batches(
                leagues, self._sync_league_isolated, self.batch_size, on_batch_done=batch_done
            )

            # Step 4: Fold per-league outcomes into the summary
            for outcome in outcomes:
                result.rosters_processed += outcome.counts.rosters
                result.matchups_processed += outcome.counts.matchups
                result.drafts_processed += outcome.counts.drafts
                if outcome.success:
                    result.leagues_processed += 1
                else:
                    result.errors.append(f"Failed to sync league {outcome.league_id}: {outcome.error}")
                    result.success = False

            self._report_progress('complete', 1, 1, 'Sync complete!')
            return result

        except Exception as e:
            logger.error(f"Sync failed for user {username}: {e}")
            result.success = False
            result.errors.append(str(e) or 'Unknown error occurred')
            return result

    async def _sync_league_isolated(self, league: SleeperLeague) -> LeagueSyncOutcome:
        """Sync one league, capturing its failure instead of raising"""
        counts = LeagueSyncCounts()
        try:
            logger.info(f"Syncing league: {league.name} ({league.season}) - {league.league_id}")
            await self.sync_league(league, counts)
            logger.info(f"Successfully synced league: {league.name}")
            return LeagueSyncOutcome(league.league_id, counts)
        except Exception as e:
            logger.error(f"Failed to sync league {league.league_id}: {e}")
            return LeagueSyncOutcome(league.league_id, counts, success=False, error=str(e) or 'Unknown error')

    async def sync_league(self, league: SleeperLeague, counts: Optional[LeagueSyncCounts] = None) -> LeagueSyncCounts:
        """Sync a single league and everything hanging off it"""
        counts = counts if counts is not None else LeagueSyncCounts()

        # 1. League row; failure aborts this league
        await self.persistence.upsert_league(league)

        # 2. League members
        league_users = await self.client.get_league_users(league.league_id)
        for user in league_users:
            await self.persistence.upsert_league_member(league.league_id, user)
        logger.debug(f"Upserted {len(league_users)} league members for league {league.league_id}")

        # 3. Rosters, linked to the member owning them
        counts.rosters += await self._sync_rosters(league.league_id)

        # 4. Matchups for every week of a started season
        if league.has_matchups:
            total_weeks = league.total_weeks(settings.default_playoff_week_start)
            counts.matchups += await self._sync_matchups(league.league_id, total_weeks)

        # 5. Draft and its picks
        if league.draft_id:
            await self._sync_draft(league.league_id, league.draft_id)
            counts.drafts += 1

        return counts

    async def _sync_rosters(self, league_id: str) -> int:
        rosters = await self.client.get_league_rosters(league_id)
        synced = 0

        for roster in rosters:
            member_id = await self.persistence.get_league_member_id(league_id, roster.owner_id)
            if member_id is None:
                logger.warning(f"Member not found for roster {roster.roster_id} in league {league_id}")
                continue

            await self.persistence.upsert_roster(league_id, roster, member_id)
            synced += 1

        return synced

    async def _sync_matchups(self, league_id: str, total_weeks: int) -> int:
        """Sync weeks 1..total_weeks in batches; returns matchup rows written"""

        async def sync_week(week: int) -> int:
            try:
                matchups = await self.client.get_league_matchups(league_id, week)
            except Exception as e:
                # 404 is normal for future weeks
                if not is_not_found(e):
                    logger.warning(f"Failed to fetch matchups for league {league_id}, week {week}: {e}")
                return 0

            written = await asyncio.gather(*(self._upsert_matchup(league_id, week, m) for m in matchups))
            return sum(written)

        weeks = list(range(1, total_weeks + 1))
        per_week = await gather_in_batches(weeks, sync_week, self.batch_size, self.matchup_batch_delay)
        return sum(per_week)

    async def _upsert_matchup(self, league_id: str, week: int, matchup: SleeperMatchup) -> int:
        try:
            await self.persistence.upsert_matchup(league_id, week, matchup)
            return 1
        except Exception as e:
            logger.error(f"Failed to upsert matchup (league {league_id}, week {week}, roster {matchup.roster_id}): {e}")
            return 0

    async def _sync_draft(self, league_id: str, draft_id: str):
        draft = await self.client.get_draft(draft_id)
        await self.persistence.upsert_draft(league_id, draft)

        picks = await self.client.get_draft_picks(draft_id)
        failed = 0
        for pick in picks:
            try:
                await self.persistence.upsert_draft_pick(draft_id, pick)
            except Exception as e:
                failed += 1
                logger.error(f"Failed to upsert draft pick {pick.pick_no} of draft {draft_id}: {e}")

        logger.debug(f"Synced draft {draft_id}: {len(picks) - failed}/{len(picks)} picks")

    @staticmethod
    async def sync_players(
        client: SleeperAPIClient,
        persistence: PersistenceAdapter,
        sport: str = settings.default_sport,
        chunk_size: int = settings.player_chunk_size
    ) -> int:
        """
        Refresh the global player catalog (not user scoped).

        Rows are upserted chunk_size at a time; a failed chunk is logged and
        skipped. Returns the number of players written.
        """
        players = await client.get_all_players(sport)
        rows = [player_row(player_id, player) for player_id, player in players.items()]

        count = 0
        for start in range(0, len(rows), chunk_size):
            chunk = rows[start:start + chunk_size]
            try:
                count += await persistence.upsert_players(chunk)
            except Exception as e:
                logger.error(f"Failed to upsert players chunk {start}: {e}")

        logger.info(f"Synced {count} of {len(rows)} players")
        return count

def player_row(player_id: str, player: SleeperPlayer) -> Dict[str, Any]:
    """Map a Sleeper player to a players table row"""
    full_name = player.full_name
    if not full_name and player.first_name and player.last_name:
        full_name = f"{player.first_name} {player.last_name}"

    # Handle team code mapping (OAK -> LV)
    team = player.team
    if team == 'OAK':
        team = 'LV'

    return {
        'player_id': player_id,
        'name': full_name,
        'first_name': player.first_name,
        'last_name': player.last_name,
        'position': player.position,
        'team': team,
        'age': player.age,
        'years_exp': player.years_exp,
        'status': player.status,
        'fantasy_positions': player.fantasy_positions or [],
        'player_metadata': player.model_dump(mode="json"),
    }
