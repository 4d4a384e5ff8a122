# conversation_analyzer/config.py
import os
from dotenv import load_dotenv

# Load environment variables from .env (recommended)
load_dotenv()

# ----- Analysis options -----
ANALYSIS_TYPES = [
    "General Psychological Analysis",
    "Relationship Dynamics",
    "Communication Patterns",
    "Conflict Resolution",
    "Emotional Intelligence",
]
DEFAULT_ANALYSIS_TYPE = ANALYSIS_TYPES[0]

MAX_TOKEN_CHOICES = [250, 500, 1000, 1500]
DEFAULT_MAX_TOKENS = 500

SUGGESTED_MODELS = ["gemini-2.5-flash", "gemini-2.5-pro", "gemini-2.5-flash-lite"]

DEFAULT_TEMPERATURE = "0.7"
MIN_TEMPERATURE = 0.1
MAX_TEMPERATURE = 1.0


class Config:
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    DEFAULT_MODEL: str = os.getenv("DEFAULT_MODEL", SUGGESTED_MODELS[0])

    # "memory" keeps records for the process lifetime, "database" uses DATABASE_URL
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "memory").lower()
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./conversations.db")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: list[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]

    # Used by the Gradio client
    BACKEND_URL: str = os.getenv("BACKEND_URL", "http://127.0.0.1:8000")


config = Config()
