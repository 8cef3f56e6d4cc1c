"""Shared pytest fixtures for sleeper-league-sync tests."""
import os

# Must be set before sleeper_sync.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

from typing import Dict, Generator, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from sleeper_sync.exceptions import HttpError, PersistenceError
from sleeper_sync.integrations import base_api
from sleeper_sync.models import Base
from sleeper_sync.schemas.sleeper import (
    SleeperUser, SleeperLeague, SleeperRoster, SleeperMatchup, SleeperDraft, SleeperDraftPick, SleeperPlayer
)
from sleeper_sync.services.persistence import PersistenceAdapter


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestSessionLocal = sessionmaker(bind=engine)
    session = TestSessionLocal()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def sleeps(monkeypatch) -> List[float]:
    """Record asyncio.sleep delays instead of waiting."""
    recorded: List[float] = []

    async def fake_sleep(delay, *args, **kwargs):
        recorded.append(delay)

    monkeypatch.setattr(base_api.asyncio, "sleep", fake_sleep)
    return recorded


# ─────────────────────────────────────────────────────────────
# In-memory persistence
# ─────────────────────────────────────────────────────────────

class InMemoryPersistence(PersistenceAdapter):
    """PersistenceAdapter keeping rows in dicts keyed by their natural keys.

    ``failures`` maps an entity name to a predicate on its key; matching
    upserts raise PersistenceError.
    """

    def __init__(self):
        self.leagues: Dict[str, SleeperLeague] = {}
        self.members: Dict[tuple, dict] = {}
        self.rosters: Dict[tuple, dict] = {}
        self.matchups: Dict[tuple, SleeperMatchup] = {}
        self.drafts: Dict[str, dict] = {}
        self.draft_picks: Dict[tuple, SleeperDraftPick] = {}
        self.players: Dict[str, dict] = {}
        self.failures = {}
        self._next_member_id = 1

    def _check(self, entity, key):
        predicate = self.failures.get(entity)
        if predicate and predicate(key):
            raise PersistenceError(entity, "injected failure", str(key))

    async def upsert_league(self, league):
        self._check("league", league.league_id)
        self.leagues[league.league_id] = league

    async def upsert_league_member(self, league_id, user):
        key = (league_id, user.user_id)
        self._check("league member", key)
        existing = self.members.get(key)
        member_id = existing["id"] if existing else self._next_member_id
        if not existing:
            self._next_member_id += 1
        self.members[key] = {"id": member_id, "display_name": user.display_name}
        return member_id

    async def get_league_member_id(self, league_id, sleeper_user_id):
        member = self.members.get((league_id, sleeper_user_id))
        return member["id"] if member else None

    async def upsert_roster(self, league_id, roster, league_member_id):
        key = (league_id, roster.roster_id)
        self._check("roster", key)
        self.rosters[key] = {"league_member_id": league_member_id, "players": roster.players or []}

    async def upsert_matchup(self, league_id, week, matchup):
        key = (league_id, week, matchup.roster_id)
        self._check("matchup", key)
        self.matchups[key] = matchup

    async def upsert_draft(self, league_id, draft):
        self._check("draft", draft.draft_id)
        self.drafts[draft.draft_id] = {"league_id": league_id, "type": draft.type}

    async def upsert_draft_pick(self, draft_id, pick):
        key = (draft_id, pick.pick_no)
        self._check("draft pick", key)
        self.draft_picks[key] = pick

    async def upsert_players(self, players):
        self._check("players", players[0]["player_id"])
        for row in players:
            self.players[row["player_id"]] = row
        return len(players)


@pytest.fixture
def persistence() -> InMemoryPersistence:
    return InMemoryPersistence()


# ─────────────────────────────────────────────────────────────
# Fake Sleeper client
# ─────────────────────────────────────────────────────────────

def _resolve(value):
    if isinstance(value, Exception):
        raise value
    return value


class FakeSleeperClient:
    """Stands in for SleeperAPIClient; any value set to an exception is raised."""

    def __init__(self):
        self.users: Dict[str, SleeperUser] = {}
        self.leagues: List[SleeperLeague] = []
        self.league_users: Dict[str, object] = {}
        self.rosters: Dict[str, object] = {}
        self.matchups: Dict[tuple, object] = {}
        self.drafts: Dict[str, object] = {}
        self.draft_picks: Dict[str, object] = {}
        self.players: Dict[str, SleeperPlayer] = {}
        self.discovery_calls: List[tuple] = []
        self.matchup_calls: List[tuple] = []

    async def get_user(self, username_or_id):
        return _resolve(self.users.get(username_or_id))

    async def discover_leagues_for_user_across_years(self, user_id, sport, start_year, end_year):
        self.discovery_calls.append((user_id, sport, start_year, end_year))
        return list(_resolve(self.leagues))

    async def get_league_users(self, league_id):
        return _resolve(self.league_users.get(league_id, []))

    async def get_league_rosters(self, league_id):
        return _resolve(self.rosters.get(league_id, []))

    async def get_league_matchups(self, league_id, week):
        self.matchup_calls.append((league_id, week))
        key = (league_id, week)
        if key not in self.matchups:
            raise HttpError(404, f"https://api.sleeper.app/v1/league/{league_id}/matchups/{week}")
        return _resolve(self.matchups[key])

    async def get_draft(self, draft_id):
        return _resolve(self.drafts[draft_id])

    async def get_draft_picks(self, draft_id):
        return _resolve(self.draft_picks.get(draft_id, []))

    async def get_all_players(self, sport="nfl"):
        return _resolve(self.players)


@pytest.fixture
def sleeper() -> FakeSleeperClient:
    return FakeSleeperClient()


# ─────────────────────────────────────────────────────────────
# Payload builders
# ─────────────────────────────────────────────────────────────

def make_league(league_id: str, season: str = "2024", status: str = "complete",
                playoff_week_start: Optional[int] = 15, draft_id: Optional[str] = None) -> SleeperLeague:
    settings = {"num_teams": 10}
    if playoff_week_start is not None:
        settings["playoff_week_start"] = playoff_week_start
    return SleeperLeague(
        league_id=league_id,
        name=f"League {league_id}",
        season=season,
        status=status,
        sport="nfl",
        settings=settings,
        total_rosters=10,
        draft_id=draft_id,
    )


def make_users(count: int = 10) -> List[SleeperUser]:
    return [
        SleeperUser(user_id=f"u{i}", username=f"user{i}", display_name=f"User {i}")
        for i in range(1, count + 1)
    ]


def make_rosters(count: int = 10) -> List[SleeperRoster]:
    return [
        SleeperRoster(
            roster_id=i,
            owner_id=f"u{i}",
            players=[f"p{i}a", f"p{i}b"],
            starters=[f"p{i}a"],
            settings={"wins": i, "losses": 10 - i, "ties": 0, "fpts": 1000 + i, "fpts_decimal": 25},
        )
        for i in range(1, count + 1)
    ]


def make_matchups(count: int = 10) -> List[SleeperMatchup]:
    return [
        SleeperMatchup(
            roster_id=i,
            matchup_id=(i + 1) // 2,
            points=100.0 + i,
            starters=[f"p{i}a"],
            players_points={f"p{i}a": 10.5},
        )
        for i in range(1, count + 1)
    ]


def make_draft(draft_id: str, league_id: str) -> SleeperDraft:
    return SleeperDraft(draft_id=draft_id, league_id=league_id, type="snake", status="complete",
                        season="2024", settings={"rounds": 15, "teams": 10})


def make_picks(draft_id: str, count: int = 3) -> List[SleeperDraftPick]:
    return [
        SleeperDraftPick(draft_id=draft_id, pick_no=i, round=1, roster_id=i, player_id=f"p{i}a",
                         metadata={"position": "RB"})
        for i in range(1, count + 1)
    ]


def stock_league(sleeper: FakeSleeperClient, league: SleeperLeague, played_weeks: int = 14,
                 teams: int = 10):
    """Register a league with members, rosters and played weeks on the fake client."""
    sleeper.league_users[league.league_id] = make_users(teams)
    sleeper.rosters[league.league_id] = make_rosters(teams)
    for week in range(1, played_weeks + 1):
        sleeper.matchups[(league.league_id, week)] = make_matchups(teams)
