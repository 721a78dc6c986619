"""
Render Module - Black Box Interface

Purpose: Turn canonical session state into one display string
Interface: render(), RenderPolicy, TERSE_POLICY, VERBOSE_POLICY
Hidden: Filtering, ordering, name cleanup

Pure functions only - no I/O, no locking.
"""

from .renderer import TERSE_POLICY, VERBOSE_POLICY, RenderPolicy, render, render_sessions

__all__ = ["RenderPolicy", "TERSE_POLICY", "VERBOSE_POLICY", "render", "render_sessions"]
