"""
Scheduler Module - Black Box Interface

Purpose: Coalesce bursts of state changes into one status publish
Interface: request(), cancel(), status
Hidden: Timer task management, render + publish on fire

Fixed-window debounce: the first request arms the timer, later requests
inside the window are absorbed, the publish reads state at fire time.
"""

from .scheduler import DebounceScheduler, SchedulerStatus

__all__ = ["DebounceScheduler", "SchedulerStatus"]
