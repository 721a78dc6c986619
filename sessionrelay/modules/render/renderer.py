"""
Status rendering.

Two policies cover the sinks in use: a terse single-line activity status
that hides idle sessions, and a verbose listing grouped by source that
shows every session with its hidden marker.
"""

from dataclasses import dataclass, replace
from typing import FrozenSet, Iterable, List, Mapping, Tuple

from ..session import CanonicalState, SessionRecord

DEFAULT_DENYLIST = frozenset({"Userspace", "Local"})
DEFAULT_STRIP_TAG = "[fp]"


@dataclass(frozen=True)
class RenderPolicy:
    """How a snapshot becomes text."""

    denylist: FrozenSet[str] = DEFAULT_DENYLIST
    exclude_idle: bool = True
    strip_tag: str = DEFAULT_STRIP_TAG
    separator: str = " | "
    group_by_source: bool = False
    hidden_marker: str = ""
    empty_text: str = ""

    def configured(self, denylist: Iterable[str], strip_tag: str) -> "RenderPolicy":
        """Copy of this policy with deployment-specific denylist and tag."""
        return replace(self, denylist=frozenset(denylist), strip_tag=strip_tag)


TERSE_POLICY = RenderPolicy()

VERBOSE_POLICY = RenderPolicy(
    exclude_idle=False,
    separator="\n",
    group_by_source=True,
    hidden_marker=" (hidden)",
    empty_text="No sessions are currently running.",
)


def render(state: CanonicalState, policy: RenderPolicy = TERSE_POLICY) -> str:
    """
    Render canonical state into a display string.

    Args:
        state: source_id -> session_key -> SessionRecord
        policy: Filtering and formatting rules

    Returns:
        Display string, or policy.empty_text when nothing is visible
    """
    if policy.group_by_source:
        blocks = []
        for source_id in sorted(state):
            entries = _format_entries(state[source_id].items(), policy)
            if entries:
                blocks.append(f"[{source_id}]\n" + policy.separator.join(entries))
        return "\n".join(blocks) if blocks else policy.empty_text

    merged = [item for sessions in state.values() for item in sessions.items()]
    entries = _format_entries(merged, policy)
    return policy.separator.join(entries) if entries else policy.empty_text


def render_sessions(sessions: Mapping[str, SessionRecord], policy: RenderPolicy = TERSE_POLICY) -> str:
    """Render a single merged session_key -> SessionRecord map."""
    entries = _format_entries(sessions.items(), policy)
    return policy.separator.join(entries) if entries else policy.empty_text


def _format_entries(items: Iterable[Tuple[str, SessionRecord]], policy: RenderPolicy) -> List[str]:
    visible = []
    for key, record in items:
        name = _clean_name(record.display_name or key, policy.strip_tag)
        if key in policy.denylist or name in policy.denylist:
            continue
        if policy.exclude_idle and record.active_user_count == 0:
            continue
        visible.append((name, record))

    # Stable two-pass ordering: name ascending, then active users descending
    visible.sort(key=lambda entry: entry[0])
    visible.sort(key=lambda entry: entry[1].active_user_count, reverse=True)

    return [
        f"{name}: {record.active_user_count}" + (policy.hidden_marker if record.hidden else "")
        for name, record in visible
    ]


def _clean_name(name: str, strip_tag: str) -> str:
    if strip_tag:
        name = name.replace(strip_tag, "")
    return name.strip()
