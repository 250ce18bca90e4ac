"""Identifier generation for new title records."""

import uuid


def new_id() -> str:
    """Return a new unique identifier (32 hex chars)."""
    return uuid.uuid4().hex
