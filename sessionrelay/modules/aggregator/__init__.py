"""
Aggregator Module - Black Box Interface

Purpose: Own the canonical merged session state
Interface: apply_full_replace(), apply_upsert(), apply_remove(), snapshot()
Hidden: Locking, change detection, listener fan-out

All sources write through this module; the renderer only reads snapshots.
"""

from .aggregator import Aggregator, ChangeListener

__all__ = ["Aggregator", "ChangeListener"]
