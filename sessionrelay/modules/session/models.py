"""
Session data model.

A SessionRecord is an immutable value. Equality is structural over the four
comparable fields; display_name and owner_id travel with the record but do
not take part in change detection.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional


@dataclass(frozen=True)
class SessionRecord:
    """Observable facts about one session."""

    active_user_count: int = 0
    total_user_count: int = 0
    access_level: str = ""
    hidden: bool = False
    display_name: str = field(default="", compare=False)
    owner_id: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        if self.active_user_count < 0 or self.total_user_count < 0:
            raise ValueError("User counts must be non-negative")

    def with_name(self, display_name: str) -> "SessionRecord":
        """Return a copy carrying a different display name."""
        return replace(self, display_name=display_name)


# sessionKey -> SessionRecord for one source
SourceMapping = Dict[str, SessionRecord]

# sourceId -> (sessionKey -> SessionRecord)
CanonicalState = Dict[str, SourceMapping]
