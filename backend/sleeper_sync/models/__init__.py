from .base import Base
from .leagues import League, LeagueMember
from .rosters import Roster
from .matchups import Matchup
from .drafts import Draft, DraftPick
from .players import Player
from .users import AppUser, SyncLog

__all__ = [
    "Base",
    "League", "LeagueMember",
    "Roster",
    "Matchup",
    "Draft", "DraftPick",
    "Player",
    "AppUser", "SyncLog",
]
