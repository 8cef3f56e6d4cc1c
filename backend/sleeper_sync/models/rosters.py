from sqlalchemy import Column, String, Integer, DECIMAL, JSON, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin

class Roster(Base, TimestampMixin):
    __tablename__ = "rosters"

    # Surrogate key, the natural key is (league_id, roster_id)
    id = Column(Integer, primary_key=True, autoincrement=True)

    league_id = Column(String(50), ForeignKey('leagues.league_id'), nullable=False, index=True)
    roster_id = Column(Integer, nullable=False)  # Sleeper's roster_id, unique per league
    league_member_id = Column(Integer, ForeignKey('league_members.id'), nullable=False, index=True)

    # Roster composition (JSON arrays of player IDs)
    players = Column(JSON)
    starters = Column(JSON)
    reserve = Column(JSON)
    taxi = Column(JSON)

    # Raw roster settings (wins, losses, fpts, waiver budget...)
    settings = Column(JSON)

    # Season record copied out of settings
    wins = Column(Integer, default=0)
    losses = Column(Integer, default=0)
    ties = Column(Integer, default=0)
    fpts = Column(DECIMAL(8, 2), default=0)
    fpts_against = Column(DECIMAL(8, 2), default=0)

    # Relationships
    league = relationship("League", back_populates="rosters")
    member = relationship("LeagueMember", back_populates="rosters")

    __table_args__ = (
        UniqueConstraint('league_id', 'roster_id', name='uq_rosters_league_roster'),
        Index('ix_rosters_member_league', 'league_member_id', 'league_id'),
    )

    def __repr__(self):
        return f"<Roster(league={self.league_id}, roster={self.roster_id}, member={self.league_member_id})>"
