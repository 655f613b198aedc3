import os
import sys

from loguru import logger

DEFAULT_PROJECT_ID = "demo-project"
DEFAULT_LOG_LEVEL = "WARNING"


def get_project_id() -> str:
    # Same env vars the real client and emulator tooling read.
    return (
        os.getenv("FIRESTORE_PROJECT_ID")
        or os.getenv("GOOGLE_CLOUD_PROJECT")
        or DEFAULT_PROJECT_ID
    )


def get_log_level() -> str:
    return (os.getenv("FAKE_FIRESTORE_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()


def configure_logging(level: str | None = None) -> int:
    """
    Turn on the package's loguru output (disabled on import) and add a stderr sink.

    Returns the sink id so callers can `logger.remove()` it again.
    """
    logger.enable("fake_firestore")
    return logger.add(sys.stderr, level=(level or get_log_level()).upper(), filter="fake_firestore")
