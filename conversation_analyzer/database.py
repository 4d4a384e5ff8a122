# conversation_analyzer/database.py
import datetime

from sqlalchemy import TIMESTAMP, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.types import TypeDecorator


Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """Timestamps stored as UTC and always read back timezone-aware (SQLite drops the offset)."""

    impl = TIMESTAMP(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            return value.astimezone(datetime.timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=datetime.timezone.utc)
        return value.astimezone(datetime.timezone.utc)


def make_engine(database_url: str):
    """Create an engine; SQLite needs check_same_thread off for the threadpool."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


def make_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine) -> None:
    # import models so SQLAlchemy registers them
    import conversation_analyzer.models.user  # noqa: F401
    import conversation_analyzer.models.conversation  # noqa: F401
    import conversation_analyzer.models.analysis  # noqa: F401

    Base.metadata.create_all(bind=engine)
