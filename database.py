from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, DateTime, Text

from config import get_settings

DATABASE_URL = get_settings().database_url


def make_engine(url: str, **kwargs):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, pool_pre_ping=True, future=True, connect_args=connect_args, **kwargs)


def make_session_factory(bind):
    return sessionmaker(bind=bind, autoflush=False, autocommit=False, future=True)


engine = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)


class Base(DeclarativeBase):
    pass


class KVEntry(Base):
    __tablename__ = "kv_store"
    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


def init_db(bind=None):
    """Initialize database tables. Creates tables if they don't exist."""
    Base.metadata.create_all(bind=bind or engine)
