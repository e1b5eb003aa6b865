from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import relationship
from .base import Base, utcnow

class User(Base):
    __tablename__ = "users"

    username = Column(String(50), primary_key=True)
    # bcrypt digest, never the plaintext
    password = Column(Text, nullable=False)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    joined_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    sent_messages = relationship("Message", foreign_keys="Message.from_username", back_populates="from_user")
    received_messages = relationship("Message", foreign_keys="Message.to_username", back_populates="to_user")
