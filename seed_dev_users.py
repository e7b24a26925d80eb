import asyncio
from database import (
    users_collection,
    daily_logs_collection,
    user_goals_collection,
    live_activities_collection,
    live_activity_participants_collection,
)
from models.user import UserModel
import uuid
from datetime import datetime, timedelta
from dotenv import load_dotenv

# Load environment variables (for DB connection string)
load_dotenv()

async def seed_users():
    print("🌱 Seeding Test Users...")

    # Profiles the reminder strategies read (weight drives hydration, country drives suggestions)
    test_users = [
        {"name": "Asha (Test)", "email": "asha@test.com", "weight": 62, "height": 160, "age": 29, "gender": "female", "country": "India"},
        {"name": "Ben (Test)", "email": "ben@test.com", "weight": 84, "height": 182, "age": 35, "gender": "male", "country": "United States of America"},
        {"name": "Lin (Test)", "email": "lin@test.com", "weight": 70, "height": 170, "age": 41, "gender": "female", "country": "China"},
    ]
    goals = {"asha@test.com": "lose", "ben@test.com": "gain", "lin@test.com": "maintain"}

    today = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
    count = 0
    user_ids = []
    for user_data in test_users:
        # Check if user already exists to avoid duplicates
        existing = await users_collection.find_one({"email": user_data["email"]})
        if existing:
            print(f"⚠️ Skipped (Exists): {user_data['name']}")
            user_ids.append(existing["id"])
            continue

        new_user = UserModel(**user_data)
        await users_collection.insert_one(new_user.model_dump())
        await user_goals_collection.insert_one({"user_id": new_user.id, "calories": 2000, "weight_goal": goals[new_user.email]})
        await daily_logs_collection.insert_one({
            "user_id": new_user.id,
            "date": today,
            "foods": [{"name": "Oats", "calories": 350}],
            "exercises": [],
            "water_intake": 750,
        })
        user_ids.append(new_user.id)
        print(f"✅ Added: {user_data['name']}")
        count += 1

    # One live activity starting in 15 minutes, joined by the first user
    activity_id = str(uuid.uuid4())
    await live_activities_collection.insert_one({
        "id": activity_id,
        "title": "Evening Yoga Flow",
        "activity_type": "yoga_session",
        "scheduled_start": datetime.now().replace(second=0, microsecond=0) + timedelta(minutes=15),
        "host_email": "coach@test.com",
        "is_active": True,
    })
    if user_ids:
        await live_activity_participants_collection.insert_one({"activity_id": activity_id, "user_id": user_ids[0]})
    print("✅ Added live activity: Evening Yoga Flow")

    print(f"\n🎉 Seeding Complete! Added {count} new users.")

if __name__ == "__main__":
    asyncio.run(seed_users())
