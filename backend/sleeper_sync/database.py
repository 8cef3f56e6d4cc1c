from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sleeper_sync.config import settings

def _engine_options(database_url: str) -> dict:
    """In-memory SQLite needs a single shared connection across threads"""
    if database_url == "sqlite://" or (database_url.startswith("sqlite") and ":memory:" in database_url):
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {}

# Create engine
engine = create_engine(settings.database_url, echo=False, **_engine_options(settings.database_url))

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def create_tables():
    """Create all tables in the database"""
    # Import all models to ensure they're registered
    from sleeper_sync.models import Base
    Base.metadata.create_all(bind=engine)

def get_db():
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
