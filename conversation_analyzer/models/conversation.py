# conversation_analyzer/models/conversation.py
import datetime
from sqlalchemy import Column, Integer, String, Text
from conversation_analyzer.database import Base, UTCDateTime

class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(String(36), primary_key=True, index=True)
    title = Column(String, nullable=True)
    content = Column(Text, nullable=False)
    analysis_type = Column(String, nullable=False, default="General Psychological Analysis")
    model = Column(String, nullable=False)
    temperature = Column(String, nullable=False, default="0.7")  # kept as text, e.g. "0.7"
    max_tokens = Column(Integer, nullable=False, default=500)
    created_at = Column(UTCDateTime, nullable=False, index=True,
                        default=lambda: datetime.datetime.now(datetime.timezone.utc))
