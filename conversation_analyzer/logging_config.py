# conversation_analyzer/logging_config.py
import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger.

    Safe to call more than once (uvicorn reloads, tests importing the app):
    an existing handler installed here is replaced instead of duplicated.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    for h in list(root.handlers):
        if getattr(h, "_conversation_analyzer", False):
            root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._conversation_analyzer = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    # httpx logs every request to the model provider at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
