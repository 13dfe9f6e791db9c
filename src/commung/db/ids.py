"""Primary key generation."""

import uuid


def new_id() -> str:
    """Return a new random UUID string used as a primary key."""
    return str(uuid.uuid4())
