"""Opaque identifiers for candidates, questions and chat messages."""

from __future__ import annotations

import uuid


def new_id(prefix: str = "") -> str:
    """
    Return a new unique identifier.

    Args:
        prefix: Optional readable prefix, e.g. ``"cand"`` -> ``"cand_3f9a..."``.
    """
    token = uuid.uuid4().hex
    return f"{prefix}_{token}" if prefix else token
