from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from todo_app.config import get_settings
from todo_app.logger import logger

settings = get_settings()


def make_engine(url: str, **kwargs):
    """Create an engine; SQLite connections are shared with the worker thread"""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    if url in ("sqlite://", "sqlite:///:memory:"):
        # In-memory databases only exist on a single connection
        kwargs.setdefault("poolclass", StaticPool)
    return create_engine(url, echo=settings.debug, **kwargs)


engine = make_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Database session dependency"""
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {str(e)}")
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind=None):
    """Initialize database tables"""
    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error creating database tables: {str(e)}")
        raise
