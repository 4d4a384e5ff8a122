# conversation_analyzer/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from conversation_analyzer.config import config
from conversation_analyzer.logging_config import setup_logging
from conversation_analyzer.routers import analyses, conversations
from conversation_analyzer.services.storage import StorageError

setup_logging(config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Conversation Analyzer")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# include routers
app.include_router(conversations.router)
app.include_router(analyses.router)


def format_validation_errors(errors) -> str:
    """'maxTokens: Input should be 250, 500, 1000 or 1500; content: Field required'"""
    parts = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        parts.append(f"{field}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": format_validation_errors(exc.errors())})


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError):
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.get("/")
def root():
    return {"status": "ok", "message": "Conversation analyzer backend running."}
