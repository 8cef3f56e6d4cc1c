from sqlalchemy import Column, String, Integer, DateTime, Enum, JSON, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .base import Base, TimestampMixin

class AppUser(Base, TimestampMixin):
    """Account of this application, linked to a Sleeper username"""
    __tablename__ = "users"

    id = Column(String(50), primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    sleeper_username = Column(String(100))
    last_sync_at = Column(DateTime)

    # Relationships
    sync_logs = relationship("SyncLog", back_populates="user")

class SyncLog(Base):
    __tablename__ = "sync_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(50), ForeignKey('users.id'), nullable=False, index=True)
    league_id = Column(String(50), default='all')
    status = Column(Enum('in_progress', 'success', 'failed', name='sync_status'), default='in_progress', nullable=False)
    details = Column(JSON)
    created_at = Column(DateTime, default=func.now(), nullable=False, index=True)

    # Relationships
    user = relationship("AppUser", back_populates="sync_logs")
