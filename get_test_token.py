"""
Mint a bearer token for a local user so the reminders API can be exercised by hand:

    python get_test_token.py                     # first user in the DB
    python get_test_token.py asha@test.com --hours 12
"""

import argparse
import asyncio
from datetime import timedelta

from database import users_collection
from routes.deps import create_access_token
from logging_config import setup_logging

setup_logging()


async def get_token(email: str = None, hours: int = 24):
    query = {"email": email} if email else {}
    user = await users_collection.find_one(query, {"_id": 0, "id": 1, "email": 1})
    if not user:
        print(f"No user found{f' for {email}' if email else ''}. Run seed_dev_users.py first.")
        return

    token = create_access_token({"sub": user["id"]}, expires_delta=timedelta(hours=hours))
    print(f"USER_ID={user['id']}")
    print(f"TOKEN={token}")
    print(f'\ncurl -H "Authorization: Bearer {token}" http://localhost:8000/api/notifications/pending')


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Print a JWT for a seeded user")
    parser.add_argument("email", nargs="?", help="user email (defaults to the first user found)")
    parser.add_argument("--hours", type=int, default=24, help="token lifetime in hours")
    args = parser.parse_args()
    asyncio.run(get_token(args.email, args.hours))
