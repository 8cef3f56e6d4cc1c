"""
Write path for the mirrored Sleeper tables.

Every operation is an upsert on the entity's natural key, so replaying the
same payload leaves the stored state unchanged:

    leagues         league_id
    league_members  (league_id, sleeper_user_id)
    rosters         (league_id, roster_id)
    matchups        (league_id, week, roster_id)
    drafts          draft_id
    draft_picks     (draft_id, pick_no)
    players         player_id
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sleeper_sync.exceptions import PersistenceError
from sleeper_sync.models.leagues import League, LeagueMember
from sleeper_sync.models.rosters import Roster
from sleeper_sync.models.matchups import Matchup
from sleeper_sync.models.drafts import Draft, DraftPick
from sleeper_sync.models.players import Player
from sleeper_sync.schemas.sleeper import (
    SleeperLeague, SleeperUser, SleeperRoster, SleeperMatchup, SleeperDraft, SleeperDraftPick
)
import logging

logger = logging.getLogger(__name__)


class PersistenceAdapter(ABC):
    """Storage used by SyncService; one upsert per mirrored entity"""

    @abstractmethod
    async def upsert_league(self, league: SleeperLeague) -> None: ...

    @abstractmethod
    async def upsert_league_member(self, league_id: str, user: SleeperUser) -> int:
        """Upsert a member and return its local ID"""

    @abstractmethod
    async def get_league_member_id(self, league_id: str, sleeper_user_id: Optional[str]) -> Optional[int]: ...

    @abstractmethod
    async def upsert_roster(self, league_id: str, roster: SleeperRoster, league_member_id: int) -> None: ...

    @abstractmethod
    async def upsert_matchup(self, league_id: str, week: int, matchup: SleeperMatchup) -> None: ...

    @abstractmethod
    async def upsert_draft(self, league_id: str, draft: SleeperDraft) -> None: ...

    @abstractmethod
    async def upsert_draft_pick(self, draft_id: str, pick: SleeperDraftPick) -> None: ...

    @abstractmethod
    async def upsert_players(self, players: List[Dict[str, Any]]) -> int:
        """Upsert one chunk of player rows and return how many were written"""


class SqlAlchemyPersistence(PersistenceAdapter):
    """PersistenceAdapter backed by a SQLAlchemy session"""

    def __init__(self, db: Session):
        self.db = db

    def _run(self, entity: str, key: str, write) -> Any:
        """Apply write() to the session and commit, mapping database errors to PersistenceError"""
        try:
            result = write()
            self.db.commit()
            return result
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to upsert {entity} {key}: {e}")
            raise PersistenceError(entity, str(e), key) from e

    async def upsert_league(self, league: SleeperLeague) -> None:
        def write():
            existing = self.db.query(League).filter(League.league_id == league.league_id).first()
            row = existing or League(league_id=league.league_id)
            row.name = league.name
            row.season = league.season
            row.total_rosters = league.total_rosters
            row.status = league.status
            row.sport = league.sport
            row.settings = league.settings
            row.scoring_settings = league.scoring_settings
            row.roster_positions = league.roster_positions
            row.draft_id = league.draft_id
            row.previous_league_id = league.previous_league_id
            if not existing:
                self.db.add(row)

        self._run("league", league.league_id, write)
        logger.debug(f"Upserted league: {league.name} ({league.league_id})")

    async def upsert_league_member(self, league_id: str, user: SleeperUser) -> int:
        def write():
            existing = self.db.query(LeagueMember).filter(
                LeagueMember.league_id == league_id,
                LeagueMember.sleeper_user_id == user.user_id
            ).first()
            member = existing or LeagueMember(league_id=league_id, sleeper_user_id=user.user_id)
            member.sleeper_username = user.username or user.display_name
            member.display_name = user.display_name
            member.avatar = user.avatar
            if not existing:
                self.db.add(member)
            self.db.flush()
            return member.id

        return self._run("league member", f"{league_id}/{user.user_id}", write)

    async def get_league_member_id(self, league_id: str, sleeper_user_id: Optional[str]) -> Optional[int]:
        if not sleeper_user_id:
            return None
        member = self.db.query(LeagueMember.id).filter(
            LeagueMember.league_id == league_id,
            LeagueMember.sleeper_user_id == sleeper_user_id
        ).first()
        return member.id if member else None

    async def upsert_roster(self, league_id: str, roster: SleeperRoster, league_member_id: int) -> None:
        def write():
            existing = self.db.query(Roster).filter(
                Roster.league_id == league_id,
                Roster.roster_id == roster.roster_id
            ).first()
            row = existing or Roster(league_id=league_id, roster_id=roster.roster_id)
            settings = roster.settings or {}
            row.league_member_id = league_member_id
            row.players = roster.players or []
            row.starters = roster.starters or []
            row.reserve = roster.reserve or []
            row.taxi = roster.taxi or []
            row.settings = roster.settings
            row.wins = settings.get('wins', 0)
            row.losses = settings.get('losses', 0)
            row.ties = settings.get('ties', 0)
            row.fpts = _points(settings.get('fpts'), settings.get('fpts_decimal'))
            row.fpts_against = _points(settings.get('fpts_against'), settings.get('fpts_against_decimal'))
            if not existing:
                self.db.add(row)

        self._run("roster", f"{league_id}/{roster.roster_id}", write)

    async def upsert_matchup(self, league_id: str, week: int, matchup: SleeperMatchup) -> None:
        def write():
            existing = self.db.query(Matchup).filter(
                Matchup.league_id == league_id,
                Matchup.week == week,
                Matchup.roster_id == matchup.roster_id
            ).first()
            row = existing or Matchup(league_id=league_id, week=week, roster_id=matchup.roster_id)
            row.matchup_id = matchup.matchup_id
            row.points = matchup.points
            row.starters = matchup.starters or []
            row.starters_points = matchup.starters_points or []
            row.players_points = matchup.players_points or {}
            row.custom_points = matchup.custom_points
            if not existing:
                self.db.add(row)

        self._run("matchup", f"{league_id}/{week}/{matchup.roster_id}", write)

    async def upsert_draft(self, league_id: str, draft: SleeperDraft) -> None:
        def write():
            existing = self.db.query(Draft).filter(Draft.draft_id == draft.draft_id).first()
            row = existing or Draft(draft_id=draft.draft_id)
            row.league_id = league_id
            row.status = draft.status
            row.type = draft.type
            row.season = draft.season
            row.settings = draft.settings
            row.start_time = draft.start_time
            if not existing:
                self.db.add(row)

        self._run("draft", draft.draft_id, write)

    async def upsert_draft_pick(self, draft_id: str, pick: SleeperDraftPick) -> None:
        def write():
            existing = self.db.query(DraftPick).filter(
                DraftPick.draft_id == draft_id,
                DraftPick.pick_no == pick.pick_no
            ).first()
            row = existing or DraftPick(draft_id=draft_id, pick_no=pick.pick_no)
            row.round = pick.round
            row.roster_id = pick.roster_id
            row.player_id = pick.player_id
            row.picked_by = pick.picked_by
            row.draft_slot = pick.draft_slot
            row.is_keeper = pick.is_keeper
            row.pick_metadata = pick.metadata or {}
            if not existing:
                self.db.add(row)

        self._run("draft pick", f"{draft_id}/{pick.pick_no}", write)

    async def upsert_players(self, players: List[Dict[str, Any]]) -> int:
        if not players:
            return 0

        def write():
            ids = [player['player_id'] for player in players]
            existing = {
                player.player_id: player
                for player in self.db.query(Player).filter(Player.player_id.in_(ids)).all()
            }
            for data in players:
                row = existing.get(data['player_id'])
                if row is None:
                    row = Player(player_id=data['player_id'])
                    self.db.add(row)
                    existing[data['player_id']] = row
                for field, value in data.items():
                    if field != 'player_id':
                        setattr(row, field, value)
            return len(players)

        return self._run("players", f"{players[0]['player_id']}..{players[-1]['player_id']}", write)


def _points(whole, decimal) -> Optional[float]:
    """Sleeper splits roster points into an integer part and a two digit decimal part"""
    if whole is None:
        return None
    return round(float(whole) + float(decimal or 0) / 100, 2)
