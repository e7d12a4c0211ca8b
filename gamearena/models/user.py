"""
Profile model matching the DDL schema

Users themselves live with the external auth provider; the profile row
shares its primary key with the auth user id.
"""

from sqlalchemy import Column, String, Text, Integer, Numeric, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from gamearena.db.base import Base


class Profile(Base):
    """Profile model - matches profiles table in DDL"""
    __tablename__ = "profiles"

    id = Column(UUID(as_uuid=True), primary_key=True)
    username = Column(String(48), nullable=True, unique=True)
    full_name = Column(String(255), nullable=True)
    avatar_url = Column(String(512), nullable=True)
    bio = Column(Text, nullable=True)
    steam_id = Column(String(128), nullable=True)
    epic_games_id = Column(String(128), nullable=True)
    riot_id = Column(String(128), nullable=True)
    tournaments_played = Column(Integer, nullable=False, default=0)
    tournaments_won = Column(Integer, nullable=False, default=0)
    total_earnings = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Profile(id={self.id}, username={self.username})>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "username": self.username,
            "full_name": self.full_name,
            "avatar_url": self.avatar_url,
            "bio": self.bio,
            "steam_id": self.steam_id,
            "epic_games_id": self.epic_games_id,
            "riot_id": self.riot_id,
            "tournaments_played": self.tournaments_played,
            "tournaments_won": self.tournaments_won,
            "total_earnings": float(self.total_earnings) if self.total_earnings is not None else 0,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None
        }
