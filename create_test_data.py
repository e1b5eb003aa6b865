#!/usr/bin/env python3

import asyncio
import sys
import os

sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from messagely.auth import PasswordHasher
from messagely.config import settings
from messagely.database import build_engine, build_sessionmaker, create_tables
from messagely.exceptions import ConflictError
from messagely.models.message import Message
from messagely.repositories.user_repository import UserRepository
from messagely.schemas.user import UserCreate

USERS = [
    {"username": "alice", "password": "password123", "first_name": "Alice", "last_name": "Liddell", "phone": "+15550001"},
    {"username": "bob", "password": "password123", "first_name": "Bob", "last_name": "Builder", "phone": "+15550002"},
    {"username": "charlie", "password": "password123", "first_name": "Charlie", "last_name": "Brown", "phone": "+15550003"},
]

MESSAGES = [
    ("alice", "bob", "Hi Bob!"),
    ("bob", "alice", "Hey Alice, how are you?"),
    ("alice", "charlie", "Lunch tomorrow?"),
    ("charlie", "alice", "Sure, noon works."),
]

async def create_test_users(sessionmaker, hasher):
    async with sessionmaker() as db:
        user_repo = UserRepository(db, hasher)
        for user_data in USERS:
            try:
                user = await user_repo.register(UserCreate(**user_data))
                print(f"Created user: {user.username}")
            except ConflictError:
                print(f"User {user_data['username']} exists")

async def create_test_messages(sessionmaker):
    async with sessionmaker() as db:
        for from_username, to_username, body in MESSAGES:
            db.add(Message(from_username=from_username, to_username=to_username, body=body))
        await db.commit()
        print(f"Created {len(MESSAGES)} messages")

async def main():
    settings.validate()
    engine = build_engine(settings)
    sessionmaker = build_sessionmaker(engine)
    await create_tables(engine)

    await create_test_users(sessionmaker, PasswordHasher(settings))
    await create_test_messages(sessionmaker)
    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(main())
