"""
Profile model - public user profile and bonus point balance
"""
from sqlalchemy import Column, String, Integer, Text
from quizboard.database import Base
import uuid


class Profile(Base):
    """
    Profiles table - one row per registered user
    """
    __tablename__ = "profiles"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True)
    username = Column(String(100))
    full_name = Column(String(255))
    avatar_url = Column(Text)
    bonus_point = Column(Integer, nullable=False, default=0)
    
    def __repr__(self):
        return f"<Profile(id={self.id}, username={self.username}, bonus_point={self.bonus_point})>"
