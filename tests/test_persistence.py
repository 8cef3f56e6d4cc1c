"""Idempotence tests for SqlAlchemyPersistence against in-memory SQLite."""
import sys
from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

sys.path.insert(0, str(Path(__file__).parent))
from conftest import make_league, make_users, make_rosters, make_matchups, make_draft, make_picks

from sleeper_sync.exceptions import PersistenceError
from sleeper_sync.models import League, LeagueMember, Roster, Matchup, Draft, DraftPick, Player
from sleeper_sync.schemas.sleeper import SleeperMatchup
from sleeper_sync.services.persistence import SqlAlchemyPersistence


@pytest.fixture
def store(db_session: Session) -> SqlAlchemyPersistence:
    return SqlAlchemyPersistence(db_session)


async def seed_league(store: SqlAlchemyPersistence, league_id: str = "L1"):
    await store.upsert_league(make_league(league_id))
    return [await store.upsert_league_member(league_id, user) for user in make_users(3)]


class TestLeagueUpserts:

    @pytest.mark.asyncio
    async def test_league_upsert_is_idempotent(self, store, db_session):
        league = make_league("L1", season="2023")

        await store.upsert_league(league)
        await store.upsert_league(league)

        rows = db_session.query(League).all()
        assert len(rows) == 1
        assert rows[0].name == "League L1"
        assert rows[0].season == "2023"
        assert rows[0].settings["playoff_week_start"] == 15

    @pytest.mark.asyncio
    async def test_league_upsert_replaces_fields(self, store, db_session):
        await store.upsert_league(make_league("L1", status="in_season"))

        updated = make_league("L1", status="complete")
        updated.name = "Renamed"
        await store.upsert_league(updated)

        row = db_session.query(League).filter(League.league_id == "L1").one()
        assert row.name == "Renamed"
        assert row.status == "complete"

    @pytest.mark.asyncio
    async def test_unrecognised_status_is_stored(self, store, db_session):
        await store.upsert_league(make_league("L1", status="postponed"))

        assert db_session.query(League).filter(League.league_id == "L1").one().status == "postponed"

    @pytest.mark.asyncio
    async def test_member_upsert_keeps_id(self, store, db_session):
        first_ids = await seed_league(store)
        second_ids = [await store.upsert_league_member("L1", user) for user in make_users(3)]

        assert first_ids == second_ids
        assert db_session.query(LeagueMember).count() == 3

    @pytest.mark.asyncio
    async def test_same_user_in_two_leagues_is_two_members(self, store, db_session):
        await seed_league(store, "L1")
        await seed_league(store, "L2")

        assert db_session.query(LeagueMember).filter(LeagueMember.sleeper_user_id == "u1").count() == 2

    @pytest.mark.asyncio
    async def test_member_lookup(self, store):
        member_ids = await seed_league(store)

        assert await store.get_league_member_id("L1", "u2") == member_ids[1]
        assert await store.get_league_member_id("L1", "stranger") is None
        assert await store.get_league_member_id("L2", "u2") is None
        assert await store.get_league_member_id("L1", None) is None


class TestRosterAndMatchupUpserts:

    @pytest.mark.asyncio
    async def test_roster_upsert_is_idempotent(self, store, db_session):
        member_ids = await seed_league(store)
        roster = make_rosters(1)[0]

        await store.upsert_roster("L1", roster, member_ids[0])
        await store.upsert_roster("L1", roster, member_ids[0])

        rows = db_session.query(Roster).all()
        assert len(rows) == 1
        assert rows[0].roster_id == 1
        assert rows[0].league_member_id == member_ids[0]
        assert rows[0].players == ["p1a", "p1b"]
        assert rows[0].wins == 1
        assert float(rows[0].fpts) == pytest.approx(1001.25)

    @pytest.mark.asyncio
    async def test_roster_without_players_stores_empty_lists(self, store, db_session):
        member_ids = await seed_league(store)
        roster = make_rosters(1)[0]
        roster.players = None
        roster.starters = None

        await store.upsert_roster("L1", roster, member_ids[0])

        row = db_session.query(Roster).one()
        assert row.players == []
        assert row.starters == []

    @pytest.mark.asyncio
    async def test_matchup_keyed_by_league_week_roster(self, store, db_session):
        await seed_league(store)
        matchups = make_matchups(2)

        for _ in range(2):
            for week in (1, 2):
                for matchup in matchups:
                    await store.upsert_matchup("L1", week, matchup)

        assert db_session.query(Matchup).count() == 4

    @pytest.mark.asyncio
    async def test_matchup_update_overwrites_points(self, store, db_session):
        await seed_league(store)

        await store.upsert_matchup("L1", 1, SleeperMatchup(roster_id=1, matchup_id=1, points=0.0))
        await store.upsert_matchup("L1", 1, SleeperMatchup(roster_id=1, matchup_id=1, points=131.42,
                                                           players_points={"p1": 20.0}))

        row = db_session.query(Matchup).one()
        assert float(row.points) == pytest.approx(131.42)
        assert row.players_points == {"p1": 20.0}


class TestDraftUpserts:

    @pytest.mark.asyncio
    async def test_draft_and_picks_are_idempotent(self, store, db_session):
        await seed_league(store)
        draft = make_draft("D1", "L1")

        for _ in range(2):
            await store.upsert_draft("L1", draft)
            for pick in make_picks("D1", 3):
                await store.upsert_draft_pick("D1", pick)

        assert db_session.query(Draft).count() == 1
        assert db_session.query(DraftPick).count() == 3
        pick = db_session.query(DraftPick).filter(DraftPick.pick_no == 2).one()
        assert pick.player_id == "p2a"
        assert pick.pick_metadata == {"position": "RB"}


class TestPlayerUpserts:

    @pytest.mark.asyncio
    async def test_player_chunk_upsert(self, store, db_session):
        rows = [
            {"player_id": "1", "name": "A One", "position": "QB", "team": "KC"},
            {"player_id": "2", "name": "B Two", "position": "RB", "team": "LV"},
        ]

        assert await store.upsert_players(rows) == 2

        rows[1] = {**rows[1], "team": "DEN"}
        assert await store.upsert_players(rows) == 2

        assert db_session.query(Player).count() == 2
        assert db_session.query(Player).filter(Player.player_id == "2").one().team == "DEN"

    @pytest.mark.asyncio
    async def test_empty_chunk_is_noop(self, store, db_session):
        assert await store.upsert_players([]) == 0
        assert db_session.query(Player).count() == 0


class TestPersistenceErrors:

    @pytest.mark.asyncio
    async def test_database_error_becomes_persistence_error(self, store, db_session, monkeypatch):
        def broken_commit():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(db_session, "commit", broken_commit)

        with pytest.raises(PersistenceError) as exc_info:
            await store.upsert_league(make_league("L1"))

        assert exc_info.value.entity == "league"
        assert exc_info.value.key == "L1"
        assert "database is locked" in str(exc_info.value)
