#!/usr/bin/env python3
"""
Sync commands for mirroring Sleeper data

Usage examples:
    python sync_commands.py user --username alice
    python sync_commands.py user --username alice --verbose
    python sync_commands.py players
    python sync_commands.py players --sport nfl --chunk-size 200
"""

import asyncio
import argparse
import logging
import sys
from sleeper_sync.config import settings
from sleeper_sync.database import get_db, create_tables
from sleeper_sync.integrations.sleeper_api import SleeperAPIClient
from sleeper_sync.services.persistence import SqlAlchemyPersistence
from sleeper_sync.services.sync_service import SyncService, SyncProgress, SyncResult

class SyncCommands:
    def __init__(self):
        self.db = None
        self.client = None

    async def _setup(self):
        """Initialize database connection and API client"""
        create_tables()
        self.db = next(get_db())
        self.client = SleeperAPIClient()

    async def _cleanup(self):
        """Clean up connections"""
        if self.client:
            await self.client.close()
        if self.db:
            self.db.close()

    @staticmethod
    def _print_progress(progress: SyncProgress):
        print(f"   [{progress.stage}] {progress.progress}/{progress.total} {progress.message}")

    async def sync_user(self, username: str, verbose: bool = False) -> SyncResult:
        """Sync every league for a Sleeper user"""
        print(f"🏈 Syncing Sleeper leagues for {username}...")

        service = SyncService(
            self.client,
            SqlAlchemyPersistence(self.db),
            on_progress=self._print_progress if verbose else None
        )
        result = await service.sync_user_leagues(username)

        status = "✅ Sync complete" if result.success else "⚠️  Sync completed with errors"
        print(f"{status}: {result.leagues_processed} leagues, {result.rosters_processed} rosters, "
              f"{result.matchups_processed} matchups, {result.drafts_processed} drafts")
        for error in result.errors:
            print(f"❌ {error}")
        return result

    async def sync_players(self, sport: str, chunk_size: int) -> int:
        """Refresh the player catalog"""
        print(f"📊 Syncing {sport} player catalog...")
        count = await SyncService.sync_players(
            self.client, SqlAlchemyPersistence(self.db), sport=sport, chunk_size=chunk_size
        )
        print(f"✅ Successfully synced {count} players")
        return count

async def main():
    parser = argparse.ArgumentParser(description='Sync Sleeper league data')
    parser.add_argument('command', choices=['user', 'players'],
                        help='What to sync')
    parser.add_argument('--username', '-u', type=str,
                        help='Sleeper username (required for user)')
    parser.add_argument('--sport', type=str, default=settings.default_sport,
                        help=f'Sport for the player catalog (default: {settings.default_sport})')
    parser.add_argument('--chunk-size', type=int, default=settings.player_chunk_size,
                        help=f'Players per upsert chunk (default: {settings.player_chunk_size})')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Print progress updates')

    args = parser.parse_args()

    # Validation
    if args.command == 'user' and not args.username:
        parser.error("--username is required for user")

    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    sync = SyncCommands()
    exit_code = 0

    try:
        await sync._setup()

        if args.command == 'user':
            result = await sync.sync_user(args.username, args.verbose)
            exit_code = 0 if result.success else 1
        elif args.command == 'players':
            await sync.sync_players(args.sport, args.chunk_size)

    except KeyboardInterrupt:
        print("\n⏹️  Sync cancelled by user")
    except Exception as e:
        print(f"❌ Sync failed: {e}")
        exit_code = 1
    finally:
        await sync._cleanup()

    sys.exit(exit_code)

if __name__ == "__main__":
    asyncio.run(main())
