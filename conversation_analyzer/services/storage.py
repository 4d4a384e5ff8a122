# conversation_analyzer/services/storage.py
"""
Record store for conversations, analyses and (not yet exposed) users.

Two backends share one interface:
  - MemoryStorage: dicts keyed by id, lives as long as the process
  - DatabaseStorage: SQLAlchemy, one session per operation

The backend is picked once at start-up by get_storage() from
config.STORAGE_BACKEND; routers receive it through Depends(get_storage).
"""
import datetime
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from functools import lru_cache
from typing import Any, Callable, Dict, Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from conversation_analyzer.config import config
from conversation_analyzer.database import init_db, make_engine, make_session_factory
from conversation_analyzer.models.analysis import Analysis
from conversation_analyzer.models.conversation import Conversation
from conversation_analyzer.models.user import User
from conversation_analyzer.schemas.analysis import AnalysisCreate, AnalysisOut
from conversation_analyzer.schemas.conversation import ConversationCreate, ConversationOut
from conversation_analyzer.schemas.user import UserCreate, UserOut

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime.datetime]


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class StorageError(Exception):
    """The persistence layer failed; the message wraps the underlying cause."""


class Storage(ABC):
    def __init__(self, clock: Optional[Clock] = None):
        self._now = clock or utc_now
        self._last_stamp: Optional[datetime.datetime] = None
        self._stamp_lock = threading.Lock()

    def _stamp(self) -> datetime.datetime:
        """created_at for a new record: UTC, strictly later than the previous one."""
        with self._stamp_lock:
            now = self._now().astimezone(datetime.timezone.utc)
            if self._last_stamp is not None and now <= self._last_stamp:
                now = self._last_stamp + datetime.timedelta(microseconds=1)
            self._last_stamp = now
            return now

    # users
    @abstractmethod
    def create_user(self, data: UserCreate) -> UserOut: ...

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[UserOut]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[UserOut]: ...

    # conversations
    @abstractmethod
    def create_conversation(self, data: ConversationCreate) -> ConversationOut: ...

    @abstractmethod
    def get_conversation(self, conversation_id: str) -> Optional[ConversationOut]: ...

    @abstractmethod
    def get_conversations(self) -> List[ConversationOut]:
        """All conversations, newest first."""

    # analyses
    @abstractmethod
    def create_analysis(self, data: AnalysisCreate) -> AnalysisOut: ...

    @abstractmethod
    def get_analysis(self, conversation_id: str) -> Optional[AnalysisOut]:
        """One analysis of the conversation, or None. Which one is unspecified if several exist."""

    @abstractmethod
    def get_analyses(self) -> List[AnalysisOut]:
        """All analyses, newest first."""


class MemoryStorage(Storage):
    def __init__(self, clock: Optional[Clock] = None):
        super().__init__(clock)
        # users keep their password here; UserOut never carries it
        self.users: Dict[str, Dict[str, Any]] = {}
        self.conversations: Dict[str, ConversationOut] = {}
        self.analyses: Dict[str, AnalysisOut] = {}

    def create_user(self, data: UserCreate) -> UserOut:
        record = {"id": new_id(), **data.model_dump()}
        self.users[record["id"]] = record
        return UserOut.model_validate(record)

    def get_user(self, user_id: str) -> Optional[UserOut]:
        record = self.users.get(user_id)
        return UserOut.model_validate(record) if record else None

    def get_user_by_username(self, username: str) -> Optional[UserOut]:
        record = next((u for u in self.users.values() if u["username"] == username), None)
        return UserOut.model_validate(record) if record else None

    def create_conversation(self, data: ConversationCreate) -> ConversationOut:
        conversation = ConversationOut(id=new_id(), created_at=self._stamp(), **data.model_dump())
        self.conversations[conversation.id] = conversation
        return conversation

    def get_conversation(self, conversation_id: str) -> Optional[ConversationOut]:
        return self.conversations.get(conversation_id)

    def get_conversations(self) -> List[ConversationOut]:
        return _newest_first(self.conversations.values())

    def create_analysis(self, data: AnalysisCreate) -> AnalysisOut:
        analysis = AnalysisOut(id=new_id(), created_at=self._stamp(), **data.model_dump())
        self.analyses[analysis.id] = analysis
        return analysis

    def get_analysis(self, conversation_id: str) -> Optional[AnalysisOut]:
        return next(
            (a for a in self.analyses.values() if a.conversation_id == conversation_id),
            None,
        )

    def get_analyses(self) -> List[AnalysisOut]:
        return _newest_first(self.analyses.values())


def _newest_first(records):
    # ties on created_at go to the later insertion
    ordered = sorted(enumerate(records), key=lambda p: (p[1].created_at, p[0]), reverse=True)
    return [record for _, record in ordered]


class DatabaseStorage(Storage):
    def __init__(self, session_factory: Callable[[], Session], clock: Optional[Clock] = None):
        super().__init__(clock)
        self._session_factory = session_factory

    @classmethod
    def from_url(cls, database_url: str, clock: Optional[Clock] = None) -> "DatabaseStorage":
        engine = make_engine(database_url)
        init_db(engine)
        return cls(make_session_factory(engine), clock=clock)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Database operation failed")
            raise StorageError(f"Database operation failed: {e}") from e
        finally:
            db.close()

    def _add(self, row):
        with self._session() as db:
            db.add(row)
            db.commit()
            db.refresh(row)
            return row

    # users
    def create_user(self, data: UserCreate) -> UserOut:
        row = self._add(User(id=new_id(), username=data.username, password=data.password))
        return UserOut.model_validate(row)

    def get_user(self, user_id: str) -> Optional[UserOut]:
        with self._session() as db:
            row = db.get(User, user_id)
            return UserOut.model_validate(row) if row else None

    def get_user_by_username(self, username: str) -> Optional[UserOut]:
        with self._session() as db:
            row = db.query(User).filter(User.username == username).first()
            return UserOut.model_validate(row) if row else None

    # conversations
    def create_conversation(self, data: ConversationCreate) -> ConversationOut:
        row = self._add(Conversation(id=new_id(), created_at=self._stamp(), **data.model_dump()))
        return ConversationOut.model_validate(row)

    def get_conversation(self, conversation_id: str) -> Optional[ConversationOut]:
        with self._session() as db:
            row = db.get(Conversation, conversation_id)
            return ConversationOut.model_validate(row) if row else None

    def get_conversations(self) -> List[ConversationOut]:
        with self._session() as db:
            rows = db.query(Conversation).order_by(Conversation.created_at.desc()).all()
            return [ConversationOut.model_validate(r) for r in rows]

    # analyses
    def create_analysis(self, data: AnalysisCreate) -> AnalysisOut:
        row = self._add(Analysis(id=new_id(), created_at=self._stamp(), **data.model_dump()))
        return AnalysisOut.model_validate(row)

    def get_analysis(self, conversation_id: str) -> Optional[AnalysisOut]:
        with self._session() as db:
            row = (
                db.query(Analysis)
                .filter(Analysis.conversation_id == conversation_id)
                .order_by(Analysis.created_at.desc())
                .first()
            )
            return AnalysisOut.model_validate(row) if row else None

    def get_analyses(self) -> List[AnalysisOut]:
        with self._session() as db:
            rows = db.query(Analysis).order_by(Analysis.created_at.desc()).all()
            return [AnalysisOut.model_validate(r) for r in rows]


def build_storage(backend: str, database_url: str) -> Storage:
    if backend == "memory":
        return MemoryStorage()
    if backend == "database":
        return DatabaseStorage.from_url(database_url)
    raise ValueError(f"Unknown STORAGE_BACKEND {backend!r} (expected 'memory' or 'database')")


@lru_cache(maxsize=1)
def get_storage() -> Storage:
    """Process-wide store; built on first use."""
    storage = build_storage(config.STORAGE_BACKEND, config.DATABASE_URL)
    logger.info("Using %s record store", type(storage).__name__)
    return storage
