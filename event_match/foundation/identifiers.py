"""Correlation token generation."""

from __future__ import annotations

from uuid import uuid4


def new_token() -> str:
    """Generate a fresh, globally unique correlation token (UUID v4 string)."""
    return str(uuid4())
