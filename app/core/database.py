from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool
from .config import settings


def _build_engine(url: str):
    # SQLite (tests, local runs) shares a single connection across threads
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # connection health check
        pool_recycle=3600,  # reconnect every hour
    )


engine = _build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def enum_values(enum_cls) -> list:
    """Store enum values ("upcoming"), not member names ("UPCOMING")"""
    return [member.value for member in enum_cls]


def get_db():
    """FastAPI dependency - one session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connection() -> bool:
    """Database connection check"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def init_db():
    """Create missing tables"""
    import app.models  # noqa: F401  registers every model on Base.metadata

    Base.metadata.create_all(bind=engine)
