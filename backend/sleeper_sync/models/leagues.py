from sqlalchemy import Column, String, Integer, JSON, Index, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin

class League(Base, TimestampMixin):
    __tablename__ = "leagues"

    league_id = Column(String(50), primary_key=True)  # Sleeper league ID
    name = Column(String(100))
    season = Column(String(10), nullable=False, index=True)
    total_rosters = Column(Integer)

    # League status and metadata
    status = Column(String(20), default='in_season')  # pre_draft, drafting, in_season, complete
    sport = Column(String(20), default='nfl')

    # League configuration
    settings = Column(JSON)
    scoring_settings = Column(JSON)
    roster_positions = Column(JSON)

    draft_id = Column(String(50))
    previous_league_id = Column(String(50))

    # Relationships
    members = relationship("LeagueMember", back_populates="league")
    rosters = relationship("Roster", back_populates="league")
    matchups = relationship("Matchup", back_populates="league")
    drafts = relationship("Draft", back_populates="league")

    __table_args__ = (
        Index('ix_leagues_sport_season', 'sport', 'season'),
    )

    def __repr__(self):
        return f"<League(id={self.league_id}, name={self.name}, season={self.season})>"

class LeagueMember(Base, TimestampMixin):
    __tablename__ = "league_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    league_id = Column(String(50), ForeignKey('leagues.league_id'), nullable=False, index=True)
    sleeper_user_id = Column(String(50), nullable=False, index=True)
    sleeper_username = Column(String(100))
    display_name = Column(String(100))
    avatar = Column(String(100))

    # Relationships
    league = relationship("League", back_populates="members")
    rosters = relationship("Roster", back_populates="member")

    __table_args__ = (
        UniqueConstraint('league_id', 'sleeper_user_id', name='uq_league_members_league_user'),
    )

    def __repr__(self):
        return f"<LeagueMember(league={self.league_id}, user={self.sleeper_user_id})>"
