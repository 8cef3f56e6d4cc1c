#!/usr/bin/env python3
"""
Database setup script for Sleeper League Sync
Run this to create the tables and register the app user whose Sleeper
leagues will be synced.

    python scripts/setup_database.py
    python scripts/setup_database.py --user-id u1 --email me@example.com --sleeper-username alice
"""

import argparse
import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'backend'))

from sleeper_sync.database import SessionLocal, create_tables
from sleeper_sync.models.users import AppUser

def create_database():
    """Create database tables"""
    create_tables()
    print("✅ Database tables created successfully")

def register_user(user_id: str, email: str, sleeper_username: str):
    """Create the app user, or update the linked Sleeper username"""
    db = SessionLocal()

    try:
        user = db.query(AppUser).filter(AppUser.id == user_id).first()
        if user:
            user.email = email
            user.sleeper_username = sleeper_username
            print(f"📊 Updated user {user_id} -> Sleeper username {sleeper_username}")
        else:
            db.add(AppUser(id=user_id, email=email, sleeper_username=sleeper_username))
            print(f"✅ Registered user {user_id} -> Sleeper username {sleeper_username}")
        db.commit()

    except Exception as e:
        print(f"❌ Error registering user: {e}")
        db.rollback()
        raise
    finally:
        db.close()

def main():
    parser = argparse.ArgumentParser(description='Set up the Sleeper League Sync database')
    parser.add_argument('--user-id', type=str, help='App user ID to register')
    parser.add_argument('--email', type=str, help='App user email')
    parser.add_argument('--sleeper-username', type=str, help='Linked Sleeper username')
    args = parser.parse_args()

    print("🏈 Setting up Sleeper League Sync database...")
    create_database()

    if args.user_id:
        if not args.email or not args.sleeper_username:
            parser.error("--email and --sleeper-username are required with --user-id")
        register_user(args.user_id, args.email, args.sleeper_username)

    print("🎉 Database setup complete!")

if __name__ == "__main__":
    main()
