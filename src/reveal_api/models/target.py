# src/reveal_api/models/target.py
"""Target kinds that can be voted on or flagged."""

import enum


class TargetType(str, enum.Enum):
    """Kinds of content an actor can engage with."""

    POST = "post"
    COMMENT = "comment"
