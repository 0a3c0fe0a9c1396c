"""Identifier generation."""

from ulid import ULID


def generate_id() -> str:
    """Generate a text-based ID (ULID format, 26 chars, time-ordered)."""
    return str(ULID())
