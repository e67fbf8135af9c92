"""
Profile model - public user data keyed by the auth provider's user id
"""
from sqlalchemy import Column, String, Text, TIMESTAMP, Uuid, func
from app.database import Base


class Profile(Base):
    """
    Profiles table - one row per authenticated user
    """
    __tablename__ = "profiles"

    id = Column(Uuid(as_uuid=True), primary_key=True)
    email = Column(String(255), unique=True, nullable=False)
    full_name = Column(Text, nullable=False)
    avatar_url = Column(Text)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Profile(id={self.id}, full_name={self.full_name})>"
