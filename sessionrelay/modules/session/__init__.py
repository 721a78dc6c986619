"""
Session Module - Black Box Interface

Purpose: Value types describing observable session facts
Interface: SessionRecord, CanonicalState
Hidden: Nothing - plain immutable data
"""

from .models import CanonicalState, SessionRecord, SourceMapping

__all__ = ["SessionRecord", "CanonicalState", "SourceMapping"]
