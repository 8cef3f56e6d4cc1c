from sqlalchemy import Column, String, Integer, DECIMAL, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin

class Matchup(Base, TimestampMixin):
    __tablename__ = "matchups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    league_id = Column(String(50), ForeignKey('leagues.league_id'), nullable=False, index=True)
    week = Column(Integer, nullable=False, index=True)
    roster_id = Column(Integer, nullable=False, index=True)
    matchup_id = Column(Integer)  # Pairs the two rosters facing each other
    points = Column(DECIMAL(8, 2))
    starters = Column(JSON)
    starters_points = Column(JSON)
    players_points = Column(JSON)
    custom_points = Column(DECIMAL(8, 2))

    # Relationships
    league = relationship("League", back_populates="matchups")

    __table_args__ = (
        UniqueConstraint('league_id', 'week', 'roster_id', name='uq_matchups_league_week_roster'),
    )
