from typing import Dict, List, Optional
from sleeper_sync.config import settings
from sleeper_sync.exceptions import is_not_found
from sleeper_sync.integrations.base_api import BaseAPIClient
from sleeper_sync.schemas.sleeper import (
    SleeperUser, SleeperLeague, SleeperRoster, SleeperMatchup,
    SleeperDraft, SleeperDraftPick, SleeperPlayer
)
from sleeper_sync.utils.batching import gather_in_batches
import logging

logger = logging.getLogger(__name__)

# Number of most recent seasons queried before older ones
RECENT_SEASONS = 3

class SleeperAPIClient(BaseAPIClient):
    """Client for the Sleeper Fantasy API"""

    def __init__(self, base_url: str = settings.sleeper_api_base, **kwargs):
        super().__init__(base_url, **kwargs)

    async def get_user(self, username_or_id: str) -> Optional[SleeperUser]:
        """Get a user by username or user ID (Sleeper answers null for unknown users)"""
        data = await self._make_request(f"user/{username_or_id}")
        return SleeperUser.model_validate(data) if data else None

    async def get_user_leagues(self, user_id: str, sport: str, season: str) -> List[SleeperLeague]:
        """Get all leagues for a user in a specific season"""
        data = await self._make_request(f"user/{user_id}/leagues/{sport}/{season}")
        return [SleeperLeague.model_validate(league) for league in data or []]

    async def get_league(self, league_id: str) -> SleeperLeague:
        data = await self._make_request(f"league/{league_id}")
        return SleeperLeague.model_validate(data)

    async def get_league_rosters(self, league_id: str) -> List[SleeperRoster]:
        data = await self._make_request(f"league/{league_id}/rosters")
        return [SleeperRoster.model_validate(roster) for roster in data or []]

    async def get_league_users(self, league_id: str) -> List[SleeperUser]:
        data = await self._make_request(f"league/{league_id}/users")
        return [SleeperUser.model_validate(user) for user in data or []]

    async def get_league_matchups(self, league_id: str, week: int) -> List[SleeperMatchup]:
        """Get matchups for a specific week"""
        data = await self._make_request(f"league/{league_id}/matchups/{week}")
        return [SleeperMatchup.model_validate(matchup) for matchup in data or []]

    async def get_league_drafts(self, league_id: str) -> List[SleeperDraft]:
        data = await self._make_request(f"league/{league_id}/drafts")
        return [SleeperDraft.model_validate(draft) for draft in data or []]

    async def get_draft(self, draft_id: str) -> SleeperDraft:
        data = await self._make_request(f"draft/{draft_id}")
        return SleeperDraft.model_validate(data)

    async def get_draft_picks(self, draft_id: str) -> List[SleeperDraftPick]:
        data = await self._make_request(f"draft/{draft_id}/picks")
        return [SleeperDraftPick.model_validate(pick) for pick in data or []]

    async def get_all_players(self, sport: str = settings.default_sport) -> Dict[str, SleeperPlayer]:
        """Get the full player directory, keyed by Sleeper player ID"""
        data = await self._make_request(f"players/{sport}")
        return {player_id: SleeperPlayer.model_validate(player) for player_id, player in (data or {}).items()}

    async def get_nfl_state(self) -> Dict:
        """Get current NFL season state"""
        return await self._make_request("state/nfl")

    @staticmethod
    def season_query_order(start_year: int, end_year: int) -> List[int]:
        """Most recent seasons first (newest first), then the older ones"""
        years = list(range(start_year, end_year + 1))
        recent = years[-RECENT_SEASONS:]
        older = years[:-RECENT_SEASONS] if len(years) > RECENT_SEASONS else []
        return list(reversed(recent)) + list(reversed(older))

    async def discover_leagues_for_user_across_years(
        self,
        user_id: str,
        sport: str,
        start_year: int,
        end_year: int,
        batch_size: int = settings.batch_size,
        delay: float = settings.league_batch_delay
    ) -> List[SleeperLeague]:
        """Get a user's leagues for every season in [start_year, end_year]"""

        async def leagues_for_year(year: int) -> List[SleeperLeague]:
            try:
                return await self.get_user_leagues(user_id, sport, str(year))
            except Exception as e:
                if is_not_found(e):
                    logger.debug(f"No {sport} leagues for user {user_id} in {year}")
                else:
                    logger.warning(f"Failed to fetch leagues for {year}: {e}")
                return []

        years = self.season_query_order(start_year, end_year)
        per_year = await gather_in_batches(years, leagues_for_year, batch_size, delay)

        all_leagues = [league for leagues in per_year for league in leagues]
        logger.info(f"Discovered {len(all_leagues)} leagues for user {user_id} across {start_year}-{end_year}")
        return all_leagues

    async def discover_matchups_across_weeks(
        self,
        league_id: str,
        total_weeks: int,
        batch_size: int = settings.batch_size,
        delay: float = settings.matchup_batch_delay
    ) -> Dict[int, List[SleeperMatchup]]:
        """Get matchups for weeks 1..total_weeks; unplayed weeks come back empty"""

        async def matchups_for_week(week: int) -> List[SleeperMatchup]:
            try:
                return await self.get_league_matchups(league_id, week)
            except Exception as e:
                if not is_not_found(e):
                    logger.warning(f"Failed to fetch matchups for league {league_id}, week {week}: {e}")
                return []

        weeks = list(range(1, total_weeks + 1))
        results = await gather_in_batches(weeks, matchups_for_week, batch_size, delay)
        return dict(zip(weeks, results))
