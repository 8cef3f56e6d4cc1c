"""
Pydantic models for Sleeper API payloads.

Only the fields the sync engine reads are declared; everything else Sleeper
sends is kept as extra attributes so the raw payload survives a round trip.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class LeagueStatus(str, Enum):
    PRE_DRAFT = "pre_draft"
    DRAFTING = "drafting"
    IN_SEASON = "in_season"
    COMPLETE = "complete"


# Statuses whose leagues have weekly matchups to mirror
MATCHUP_STATUSES = {LeagueStatus.IN_SEASON.value, LeagueStatus.COMPLETE.value}


class SleeperModel(BaseModel):
    class Config:
        extra = "allow"


class SleeperUser(SleeperModel):
    user_id: str
    username: Optional[str] = None
    display_name: Optional[str] = None
    avatar: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class SleeperLeague(SleeperModel):
    league_id: str
    name: Optional[str] = None
    season: str
    season_type: Optional[str] = None
    # Kept as a plain string so an unexpected status never drops a league during discovery
    status: str = LeagueStatus.IN_SEASON.value
    sport: str = "nfl"
    settings: Optional[Dict[str, Any]] = None
    scoring_settings: Optional[Dict[str, float]] = None
    roster_positions: Optional[List[str]] = None
    total_rosters: Optional[int] = None
    draft_id: Optional[str] = None
    previous_league_id: Optional[str] = None

    def total_weeks(self, default_playoff_week_start: int = 18) -> int:
        """Regular season plus three playoff weeks"""
        playoff_week_start = (self.settings or {}).get("playoff_week_start") or default_playoff_week_start
        return int(playoff_week_start) + 3

    @property
    def has_matchups(self) -> bool:
        return self.status in MATCHUP_STATUSES


class SleeperRoster(SleeperModel):
    roster_id: int
    owner_id: Optional[str] = None
    league_id: Optional[str] = None
    players: Optional[List[str]] = None
    starters: Optional[List[str]] = None
    reserve: Optional[List[str]] = None
    taxi: Optional[List[str]] = None
    settings: Optional[Dict[str, Any]] = None


class SleeperMatchup(SleeperModel):
    roster_id: int
    matchup_id: Optional[int] = None
    points: Optional[float] = None
    starters: Optional[List[str]] = None
    starters_points: Optional[List[float]] = None
    players: Optional[List[str]] = None
    players_points: Optional[Dict[str, float]] = None
    custom_points: Optional[float] = None


class SleeperDraft(SleeperModel):
    draft_id: str
    type: Optional[str] = None
    status: Optional[str] = None
    sport: Optional[str] = None
    season: Optional[str] = None
    season_type: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None
    start_time: Optional[int] = None
    league_id: Optional[str] = None


class SleeperDraftPick(SleeperModel):
    pick_no: int
    round: Optional[int] = None
    roster_id: Optional[int] = None
    player_id: Optional[str] = None
    picked_by: Optional[str] = None
    draft_slot: Optional[int] = None
    is_keeper: Optional[bool] = None
    draft_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class SleeperPlayer(SleeperModel):
    player_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    sport: Optional[str] = None
    position: Optional[str] = None
    team: Optional[str] = None
    age: Optional[int] = None
    years_exp: Optional[int] = None
    status: Optional[str] = None
    fantasy_positions: Optional[List[str]] = None
