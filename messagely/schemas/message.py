from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from messagely.schemas.user import UserSummary

class MessageBase(BaseModel):
    id: int
    body: str
    sent_at: datetime
    read_at: Optional[datetime] = None

class MessageFromUser(MessageBase):
    """A message sent by the user, with the recipient's profile."""
    to_user: UserSummary

class MessageToUser(MessageBase):
    """A message received by the user, with the sender's profile."""
    from_user: UserSummary
