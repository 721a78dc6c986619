"""
Commands Module - Black Box Interface

Purpose: Operator commands for sessions and headless instances
Interface: list_sessions(), list_containers(), restart(), stop(), start(), update_image()
Hidden: Instance name resolution, worker-thread dispatch of runtime calls
"""

from .commands import CommandModule

__all__ = ["CommandModule"]
