from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from messagely.database import get_db
from messagely.repositories.user_repository import UserRepository
from messagely.repositories.message_repository import MessageRepository
from messagely.schemas.user import UserSummary, UserProfile, SessionClaims
from messagely.schemas.message import MessageFromUser, MessageToUser
from messagely.auth import get_current_user

router = APIRouter()

@router.get("/", response_model=List[UserSummary])
async def get_users(
    db: AsyncSession = Depends(get_db),
    current_user: SessionClaims = Depends(get_current_user)
):
    """Basic info on all users"""
    user_repo = UserRepository(db)
    return await user_repo.all()

@router.get("/{username}", response_model=UserProfile)
async def get_user(
    username: str,
    db: AsyncSession = Depends(get_db),
    current_user: SessionClaims = Depends(get_current_user)
):
    user_repo = UserRepository(db)
    return await user_repo.get(username)

@router.get("/{username}/from", response_model=List[MessageFromUser])
async def get_messages_from(
    username: str,
    db: AsyncSession = Depends(get_db),
    current_user: SessionClaims = Depends(get_current_user)
):
    """Messages sent by the user, with recipient details"""
    message_repo = MessageRepository(db)
    return await message_repo.messages_from(username)

@router.get("/{username}/to", response_model=List[MessageToUser])
async def get_messages_to(
    username: str,
    db: AsyncSession = Depends(get_db),
    current_user: SessionClaims = Depends(get_current_user)
):
    """Messages received by the user, with sender details"""
    message_repo = MessageRepository(db)
    return await message_repo.messages_to(username)
