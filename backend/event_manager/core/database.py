from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from event_manager.core.config import Settings

# Base class for all database models
# All models inherit from this to get SQLAlchemy ORM functionality
Base = declarative_base()


class Database:
    """
    Owns the engine (connection pool) and the session factory.

    One instance is built per application from its Settings and kept on
    app.state, so tests can run several isolated apps side by side.
    """

    def __init__(self, url: str):
        if url.startswith("sqlite"):
            # In-memory SQLite must share one connection across threads,
            # otherwise every session would see an empty database
            self.engine = create_engine(
                url,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        else:
            self.engine = create_engine(url)

        # autocommit=False: Changes require explicit commit
        # autoflush=False: Don't auto-flush before queries
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.DATABASE_URL)

    def create_all(self) -> None:
        """Create tables from all models that inherit from Base"""
        # Importing the models registers them on Base.metadata
        from event_manager.models import event, event_participant, user  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request):
    """
    Dependency for getting database session.

    The session is automatically closed after the request completes (via finally block).
    A database error escaping the route handler rolls back the open transaction.
    """
    db = request.app.state.database.SessionLocal()
    try:
        yield db
    except SQLAlchemyError:
        db.rollback()
        raise
    finally:
        # Always close session, even if request raises an exception
        db.close()
