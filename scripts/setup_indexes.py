import sys
import os
import asyncio
from pymongo import ASCENDING, DESCENDING

# Add parent directory to path to import database
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import (
    notification_logs_collection,
    notification_settings_collection,
    push_subscriptions_collection,
    daily_logs_collection,
    live_activities_collection,
    live_activity_participants_collection,
)
from logging_config import get_logger

logger = get_logger("setup_indexes")

async def create_indexes():
    print("🚀 Starting Index Creation...")

    # --- Notification Logs ---
    print("\n📦 Notification Logs Collection:")
    # Dismiss / mark sent: find({id: X, user_id: Y})
    await notification_logs_collection.create_index([("id", ASCENDING)], unique=True)
    print("✅ Created index: (id UNIQUE)")

    # Pending list: find({user_id: X, status: 'pending'}).sort(scheduled_time: 1)
    await notification_logs_collection.create_index([("user_id", ASCENDING), ("status", ASCENDING), ("scheduled_time", ASCENDING)])
    print("✅ Created index: (user_id, status, scheduled_time)")

    # History: find({user_id: X}).sort(created_at: -1)
    await notification_logs_collection.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    print("✅ Created index: (user_id, created_at DESC)")

    # --- Settings ---
    print("\n📦 Notification Settings Collection:")
    await notification_settings_collection.create_index([("user_id", ASCENDING)], unique=True)
    print("✅ Created index: (user_id UNIQUE)")

    # --- Push ---
    print("\n📦 Push Subscriptions Collection:")
    await push_subscriptions_collection.create_index([("user_id", ASCENDING), ("endpoint", ASCENDING)], unique=True)
    print("✅ Created index: (user_id, endpoint UNIQUE)")

    # --- Collaborator collections read every tick ---
    print("\n📦 Daily Logs Collection:")
    await daily_logs_collection.create_index([("user_id", ASCENDING), ("date", DESCENDING)])
    print("✅ Created index: (user_id, date DESC)")

    print("\n📦 Live Activities:")
    await live_activities_collection.create_index([("is_active", ASCENDING), ("scheduled_start", ASCENDING)])
    print("✅ Created index: (is_active, scheduled_start)")
    await live_activity_participants_collection.create_index([("user_id", ASCENDING), ("activity_id", ASCENDING)])
    print("✅ Created index: (user_id, activity_id)")

    print("\n✨ All indexes created successfully!")

if __name__ == "__main__":
    asyncio.run(create_indexes())
