from sqlalchemy import Column, String, Integer, JSON, Index
from .base import Base, TimestampMixin

class Player(Base, TimestampMixin):
    __tablename__ = "players"

    # Sleeper player ID
    player_id = Column(String(50), primary_key=True)

    # Basic player info
    name = Column(String(100), index=True)
    first_name = Column(String(50))
    last_name = Column(String(50))
    position = Column(String(10), index=True)
    team = Column(String(10), index=True)

    age = Column(Integer)
    years_exp = Column(Integer)
    status = Column(String(50))
    fantasy_positions = Column(JSON)

    # Full Sleeper payload
    player_metadata = Column("metadata", JSON)

    __table_args__ = (
        Index('ix_players_position_team', 'position', 'team'),
    )

    def __repr__(self):
        return f"<Player(id={self.player_id}, name={self.name}, position={self.position})>"
