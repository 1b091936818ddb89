from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from catalog.core.config import settings


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL.

    Pool sizing applies to server databases only; SQLite uses its own pool.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        database_url,
        pool_size=settings.DB_MIN_CONNECTIONS,
        max_overflow=settings.DB_MAX_CONNECTIONS - settings.DB_MIN_CONNECTIONS,
        echo=echo,
        pool_pre_ping=True,
    )


# Create SQLAlchemy engine
engine = build_engine(settings.DATABASE_URL or "sqlite:///./catalog.db", settings.DB_ECHO)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create declarative base for models
Base = declarative_base()


def get_db_session():
    """
    Dependency for getting DB session.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_database_connection(session_factory=SessionLocal) -> bool:
    """Run a trivial query; raises if the store is unreachable."""
    session = session_factory()
    try:
        session.execute(text("SELECT 1")).fetchone()
        return True
    finally:
        session.close()
