# conversation_analyzer/models/analysis.py
import datetime
from sqlalchemy import Column, String, Text, ForeignKey
from conversation_analyzer.database import Base, UTCDateTime

class Analysis(Base):
    __tablename__ = "analyses"

    id = Column(String(36), primary_key=True, index=True)
    conversation_id = Column(String(36), ForeignKey("conversations.id"), nullable=False, index=True)

    emotional_tone = Column(String, nullable=True)
    emotional_tone_description = Column(Text, nullable=True)
    power_dynamics = Column(String, nullable=True)
    power_dynamics_description = Column(Text, nullable=True)
    communication_patterns = Column(String, nullable=True)
    communication_patterns_description = Column(Text, nullable=True)
    relationship_insights = Column(String, nullable=True)
    relationship_insights_description = Column(Text, nullable=True)

    recommendations = Column(Text, nullable=True)  # JSON array as text

    # scores are stored as text, already clamped to [0, 10]
    emotional_intensity = Column(String, nullable=True)
    resolution_potential = Column(String, nullable=True)
    communication_quality = Column(String, nullable=True)
    power_balance = Column(String, nullable=True)

    raw_analysis = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, index=True,
                        default=lambda: datetime.datetime.now(datetime.timezone.utc))
