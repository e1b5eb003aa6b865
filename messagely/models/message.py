from sqlalchemy import Column, Integer, ForeignKey, Text, DateTime, String
from sqlalchemy.orm import relationship
from .base import Base, utcnow

class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    from_username = Column(String(50), ForeignKey("users.username"), nullable=False, index=True)
    to_username = Column(String(50), ForeignKey("users.username"), nullable=False, index=True)
    body = Column(Text, nullable=False)
    sent_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    # Only field allowed to change after insert
    read_at = Column(DateTime(timezone=True), nullable=True)

    from_user = relationship("User", foreign_keys=[from_username], back_populates="sent_messages")
    to_user = relationship("User", foreign_keys=[to_username], back_populates="received_messages")
