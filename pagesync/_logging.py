import hashlib
import logging

# Create the library logger
logger = logging.getLogger("pagesync")

# Add NullHandler to prevent "No handlers could be found" warnings
# if the application doesn't configure logging.
logger.addHandler(logging.NullHandler())


def redact_cursor(cursor: str | None) -> str | None:
    """
    Redacts a pagination cursor for logging.
    Cursors may embed primary key values, so they are hashed to allow
    correlation between log lines without revealing the key itself.
    """
    if cursor is None:
        return None
    try:
        return hashlib.sha256(cursor.encode("utf-8")).hexdigest()[:8]
    except Exception:
        return "<redaction_failed>"
