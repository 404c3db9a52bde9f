"""
Core Utilities

Shared helpers used across the application.
"""
import uuid
from datetime import datetime, timezone


def utcnow() -> datetime:
    """
    Return timezone-aware UTC datetime.

    Use this instead of datetime.utcnow() which returns naive datetime.
    """
    return datetime.now(timezone.utc)


def generate_id(prefix: str = "") -> str:
    """Short random identifier for drafts and packages."""
    return f"{prefix}{uuid.uuid4().hex[:12]}"
