from fastapi import APIRouter, Depends, HTTPException, Path
from typing import List
from sleeper_sync.api.dependencies import get_sleeper_client
from sleeper_sync.integrations.sleeper_api import SleeperAPIClient
from sleeper_sync.schemas.sleeper import SleeperUser, SleeperLeague, SleeperRoster, SleeperMatchup
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/user/by-username/{username}", response_model=SleeperUser)
async def get_user_by_username(username: str, client: SleeperAPIClient = Depends(get_sleeper_client)):
    """Look up a Sleeper user by username"""
    try:
        user = await client.get_user(username)
    except Exception as e:
        logger.error(f"Error fetching Sleeper user {username}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch user")
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user

@router.get("/user/{user_id}/leagues/{sport}/{season}", response_model=List[SleeperLeague])
async def get_user_leagues(
    user_id: str,
    sport: str,
    season: str = Path(pattern=r"^\d{4}$"),
    client: SleeperAPIClient = Depends(get_sleeper_client)
):
    """Get a user's leagues for one season"""
    try:
        return await client.get_user_leagues(user_id, sport, season)
    except Exception as e:
        logger.error(f"Error fetching leagues for user {user_id} ({sport} {season}): {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch leagues")

@router.get("/league/{league_id}", response_model=SleeperLeague)
async def get_league(league_id: str, client: SleeperAPIClient = Depends(get_sleeper_client)):
    try:
        return await client.get_league(league_id)
    except Exception as e:
        logger.error(f"Error fetching league {league_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch league")

@router.get("/league/{league_id}/rosters", response_model=List[SleeperRoster])
async def get_league_rosters(league_id: str, client: SleeperAPIClient = Depends(get_sleeper_client)):
    try:
        return await client.get_league_rosters(league_id)
    except Exception as e:
        logger.error(f"Error fetching rosters for league {league_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch rosters")

@router.get("/league/{league_id}/matchups/{week}", response_model=List[SleeperMatchup])
async def get_league_matchups(
    league_id: str,
    week: int = Path(ge=1, le=25),
    client: SleeperAPIClient = Depends(get_sleeper_client)
):
    try:
        return await client.get_league_matchups(league_id, week)
    except Exception as e:
        logger.error(f"Error fetching matchups for league {league_id}, week {week}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch matchups")
