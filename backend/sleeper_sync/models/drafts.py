from sqlalchemy import Column, String, Integer, BigInteger, Boolean, Enum, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin

class Draft(Base, TimestampMixin):
    __tablename__ = "drafts"

    draft_id = Column(String(50), primary_key=True)
    league_id = Column(String(50), ForeignKey('leagues.league_id'), nullable=False, index=True)
    status = Column(String(20))
    type = Column(Enum('snake', 'linear', 'auction', name='draft_type'))
    season = Column(String(10))
    settings = Column(JSON)
    start_time = Column(BigInteger)  # epoch millis

    # Relationships
    league = relationship("League", back_populates="drafts")
    picks = relationship("DraftPick", back_populates="draft")

class DraftPick(Base, TimestampMixin):
    __tablename__ = "draft_picks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    draft_id = Column(String(50), ForeignKey('drafts.draft_id'), nullable=False, index=True)
    pick_no = Column(Integer, nullable=False)
    round = Column(Integer)
    roster_id = Column(Integer)
    player_id = Column(String(50), index=True)
    picked_by = Column(String(50))
    draft_slot = Column(Integer)
    is_keeper = Column(Boolean)
    # "metadata" is reserved on declarative classes
    pick_metadata = Column("metadata", JSON)

    # Relationships
    draft = relationship("Draft", back_populates="picks")

    __table_args__ = (
        UniqueConstraint('draft_id', 'pick_no', name='uq_draft_picks_draft_pick'),
    )
