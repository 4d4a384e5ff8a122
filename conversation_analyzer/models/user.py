# conversation_analyzer/models/user.py
from sqlalchemy import Column, String
from conversation_analyzer.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False)
    password = Column(String, nullable=False)
