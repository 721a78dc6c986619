"""
Containers Module - Black Box Interface

Purpose: Control the headless session containers
Interface: ContainerControl, DockerCliControl, ContainerInfo
Hidden: Docker CLI invocation and output parsing

Replaceable with any runtime client exposing list/restart/stop/start/pull.
"""

from .docker import ContainerControl, ContainerInfo, DockerCliControl

__all__ = ["ContainerControl", "ContainerInfo", "DockerCliControl"]
