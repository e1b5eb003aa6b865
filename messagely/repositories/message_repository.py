from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import joinedload

from messagely.models.message import Message
from messagely.schemas.message import MessageFromUser, MessageToUser
from messagely.schemas.user import UserSummary

class MessageRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def messages_from(self, username: str) -> List[MessageFromUser]:
        """Messages sent by username, each with the recipient's profile (oldest first)"""
        result = await self.db.execute(
            select(Message).options(
                joinedload(Message.to_user, innerjoin=True)
            ).where(Message.from_username == username)
            .order_by(Message.sent_at.asc(), Message.id.asc())
        )
        return [MessageFromUser(
            id=msg.id,
            body=msg.body,
            sent_at=msg.sent_at,
            read_at=msg.read_at,
            to_user=UserSummary.model_validate(msg.to_user),
        ) for msg in result.scalars().all()]

    async def messages_to(self, username: str) -> List[MessageToUser]:
        """Messages received by username, each with the sender's profile (oldest first)"""
        result = await self.db.execute(
            select(Message).options(
                joinedload(Message.from_user, innerjoin=True)
            ).where(Message.to_username == username)
            .order_by(Message.sent_at.asc(), Message.id.asc())
        )
        return [MessageToUser(
            id=msg.id,
            body=msg.body,
            sent_at=msg.sent_at,
            read_at=msg.read_at,
            from_user=UserSummary.model_validate(msg.from_user),
        ) for msg in result.scalars().all()]
