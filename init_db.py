#!/usr/bin/env python3
"""
Database initialization script for Mindwave
Run this to check the Supabase connection and seed the built-in subjects
"""

import sys

from mindwave.database import db, test_supabase_connection
from mindwave.models.game import GAME_RESULTS_TABLE, GAMES_TABLE
from mindwave.models.material import MATERIALS_TABLE, NOTIFICATIONS_TABLE, SUBJECTS_TABLE
from mindwave.models.time_attack import LEADERBOARD_TABLE, SESSIONS_TABLE, SUBMISSIONS_TABLE
from mindwave.models.user import ADMIN_NOTIFICATIONS_TABLE, PASSWORD_RESETS_TABLE, USERS_TABLE
from mindwave.routes.materials import seed_subjects

TABLES = [
    USERS_TABLE,
    PASSWORD_RESETS_TABLE,
    ADMIN_NOTIFICATIONS_TABLE,
    GAMES_TABLE,
    GAME_RESULTS_TABLE,
    SESSIONS_TABLE,
    SUBMISSIONS_TABLE,
    LEADERBOARD_TABLE,
    SUBJECTS_TABLE,
    MATERIALS_TABLE,
    NOTIFICATIONS_TABLE,
]

def init_supabase() -> bool:
    """Check the Supabase connection and seed subjects"""
    print("🔄 Testing Supabase connection...")
    if not test_supabase_connection():
        print("❌ Could not reach Supabase")
        print("\n💡 Troubleshooting:")
        print("1. Check your .env file has SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY")
        print("2. Verify your Supabase project is active")
        print(f"3. Make sure these tables exist: {', '.join(TABLES)}")
        return False

    print("✅ Supabase connection successful!")
    seed_subjects(db)
    print("🌱 Subjects seeded")
    print("\n🎉 Mindwave backend is ready!")
    return True

if __name__ == "__main__":
    sys.exit(0 if init_supabase() else 1)
